# main.py
from __future__ import annotations

import json
import logging
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import streamlit as st

from impact_app.components.charts import radar_chart
from impact_app.config import configure_logging, get_settings
from impact_app.core.analytics import (
    domain_analysis,
    filter_projects,
    improvement_areas,
    portfolio_metrics,
    project_rows,
    strengths,
)
from impact_app.core.catalog import Catalog, Domain, Question, default_catalog
from impact_app.core.exceptions import StoreException
from impact_app.core.scoring import (
    Answer,
    apply_inversion,
    classify_score,
    display_value,
    percentage_to_score,
    score_assessment,
    score_color,
    score_to_percentage_label,
)
from impact_app.core.store import PROJECT_STATUSES, AssessmentStore, Project, seed_demo_data
from impact_app.reports.exports import (
    analytics_csv,
    analytics_frame,
    build_report,
    export_filename,
    notes_text,
    results_csv,
)
from impact_app.reports.pdf_export import export_pdf

logger = logging.getLogger(__name__)

STATUS_LABELS = {"active": "Active", "completed": "Completed", "on_hold": "On Hold"}


# ----------------------------
# Shared state
# ----------------------------
@st.cache_resource
def get_store() -> AssessmentStore:
    """One store per server process, shared by every browser session."""
    store = AssessmentStore(default_catalog())
    if get_settings().SEED_DEMO_DATA:
        seed_demo_data(store)
    return store


# ----------------------------
# UI Helpers
# ----------------------------
def render_question(store: AssessmentStore, project: Project, domain: Domain, q: Question, current: Optional[Answer]):
    stored = current.score if current else None
    # every widget key includes the project id
    suffix = f"{project.id}_{q.id}"

    with st.form(key=f"form_{project.id}_{domain.id}_{q.id}"):
        st.markdown(f"**{q.text}**")
        if q.guidance:
            st.caption(q.guidance)

        if q.kind == "percentage":
            pct = st.slider("Alignment (%)", 0, 100, value=(stored or 0) * 10, key=f"pct_{suffix}")
            st.caption("Saved in 10% buckets: 0% saves as 0, 1-10% as 1, through 91-100% as 10.")
        else:
            labels = [o.label for o in q.options]
            values = [o.score for o in q.options]
            shown_default = display_value(stored, q.inverted) if stored is not None else None
            index = values.index(shown_default) if shown_default in values else 0
            choice = st.radio("Score", labels, index=index, horizontal=True, key=f"q_{suffix}")

        notes = st.text_area("Notes (optional)", value=(current.notes or "") if current else "", key=f"n_{suffix}")

        if st.form_submit_button("Save answer", key=f"save_{suffix}"):
            if q.kind == "percentage":
                value = percentage_to_score(pct)
            else:
                value = apply_inversion(values[labels.index(choice)], q.inverted)
            try:
                store.submit_answer(project.id, domain.id, q.id, value, notes)
            except StoreException as e:
                st.error(str(e))
            else:
                if q.kind == "percentage":
                    st.success(f"Saved as {value} / 10 ({score_to_percentage_label(value)}%)")
                else:
                    st.success("Saved")


def render_assessment_tab(store: AssessmentStore, catalog: Catalog, project: Project):
    st.subheader("Assessment")
    st.write("Scores are 0-10. Answers can be saved one at a time and revisited later.")

    answers = {(a.domain_id, a.question_id): a for a in store.answers_for_project(project.id)}
    breakdown = score_assessment(list(answers.values()), catalog)
    progress = {s.domain_id: s for s in breakdown.domain_summaries}

    domain_names = [d.name for d in catalog.domains]
    picked = st.selectbox("Domain", domain_names, key="domain_picker")
    domain = catalog.domains[domain_names.index(picked)]

    summary = progress[domain.id]
    st.progress(
        summary.completion_percent / 100.0,
        text=f"{summary.completed_count} of {summary.total_count} questions answered",
    )
    st.caption(domain.description)

    for q in domain.questions:
        render_question(store, project, domain, q, answers.get((domain.id, q.id)))


def render_results_tab(store: AssessmentStore, catalog: Catalog, project: Project):
    st.subheader("Results Dashboard")

    answers = store.answers_for_project(project.id)
    breakdown = score_assessment(answers, catalog)
    names = {d.id: d.name for d in catalog.domains}

    c1, c2, c3 = st.columns(3)
    c1.metric("Overall Score", f"{breakdown.overall_score:.1f}")
    c2.metric("Rating", breakdown.overall_label)
    c3.metric("Domains Started", sum(1 for s in breakdown.domain_summaries if s.completed_count > 0))

    left, right = st.columns([1, 1])
    with left:
        st.markdown("### Domain Scores")
        for s in breakdown.domain_summaries:
            if s.completed_count:
                label = f":{score_color(s.average_score)}[{s.average_score:.1f}] {classify_score(s.average_score)}"
            else:
                label = "Not started"
            st.markdown(f"**{names[s.domain_id]}**: {label}")
            st.progress(s.completion_percent / 100.0, text=f"{s.completion_percent}% complete")

    with right:
        fig = radar_chart(breakdown.domain_summaries, names, catalog.scale_max)
        if fig is None:
            st.info("Complete domain assessments to see the radar chart")
        else:
            st.pyplot(fig)

    st.divider()
    st.markdown("### Export")
    generated_at = datetime.now()

    st.download_button(
        "Download results (CSV)",
        data=results_csv(project, breakdown.domain_summaries, answers, breakdown.overall_score, catalog),
        file_name=export_filename(project.name, "results", "csv"),
        mime="text/csv",
    )

    notes = notes_text(project, answers, catalog)
    if notes:
        count = sum(1 for a in answers if a.notes)
        st.download_button(
            f"Export notes ({count})",
            data=notes,
            file_name=export_filename(project.name, "notes", "txt"),
            mime="text/plain",
        )

    report = build_report(project, breakdown, answers, catalog, generated_at)
    st.download_button(
        "Download JSON report",
        data=json.dumps(report, indent=2),
        file_name=export_filename(project.name, "report", "json"),
        mime="application/json",
    )

    with tempfile.TemporaryDirectory() as tmp:
        pdf_path = Path(tmp) / "report.pdf"
        export_pdf(pdf_path, report, title=get_settings().PDF_TITLE)
        st.download_button(
            "Download PDF report",
            data=pdf_path.read_bytes(),
            file_name=export_filename(project.name, "report", "pdf"),
            mime="application/pdf",
        )


def render_analytics_tab(store: AssessmentStore, catalog: Catalog):
    st.subheader("Portfolio Analytics")

    projects = store.list_projects()
    assessments = store.all_assessments()
    answers = store.all_answers()

    m = portfolio_metrics(projects, assessments, answers)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Projects", m.total_projects)
    c2.metric("Assessments", m.total_assessments, f"{m.completed_assessments} completed", delta_color="off")
    c3.metric("Average Score", f"{m.average_score:.1f}")
    c4.metric("Organizations", m.organizations)

    status = st.selectbox(
        "Show projects",
        ["all", *PROJECT_STATUSES],
        format_func=lambda s: "All" if s == "all" else STATUS_LABELS[s],
    )
    rows = project_rows(filter_projects(projects, status), assessments, answers)
    st.dataframe(analytics_frame(rows), width="stretch", hide_index=True)
    st.download_button(
        "Export data (CSV)",
        data=analytics_csv(rows),
        file_name=f"analytics-export-{datetime.now().date().isoformat()}.csv",
        mime="text/csv",
    )

    st.markdown("### Domain Analysis (completed projects)")
    stats = domain_analysis(projects, assessments, answers, catalog)
    if not any(s.answer_count for s in stats):
        st.info("No completed projects yet. Mark a project as completed to include it here.")
        return

    for s in stats:
        value = f"{s.average_score:.1f}" if s.answer_count else "-"
        st.write(f"**{s.domain_name}**: {value} ({s.performance}, {s.answer_count} answers)")

    limit = get_settings().TOP_DOMAINS_LIMIT
    left, right = st.columns(2)
    with left:
        st.markdown("#### Strengths")
        top = strengths(stats, limit)
        if not top:
            st.caption("No domain averages 6 or above yet.")
        for s in top:
            st.success(f"{s.domain_name}: {s.average_score:.1f}")
    with right:
        st.markdown("#### Areas for Improvement")
        low = improvement_areas(stats, limit)
        if not low:
            st.caption("No assessed domain averages below 6.")
        for s in low:
            st.warning(f"{s.domain_name}: {s.average_score:.1f}")


def render_project_details(store: AssessmentStore, project: Project) -> Project:
    with st.sidebar.expander("Project details", expanded=project.lead_consultant is None):
        with st.form(f"details_{project.id}"):
            org = st.text_input("Organization", value=project.organization_name, key=f"org_{project.id}")
            lead = st.text_input("Lead consultant", value=project.lead_consultant or "", key=f"lead_{project.id}")
            research = st.text_input(
                "Research consultant (optional)", value=project.research_consultant or "", key=f"research_{project.id}"
            )
            data = st.text_input(
                "Data consultant (optional)", value=project.data_consultant or "", key=f"data_{project.id}"
            )
            if st.form_submit_button("Save details", key=f"save_details_{project.id}"):
                try:
                    project = store.update_project_details(project.id, org, lead, research, data)
                except StoreException as e:
                    st.error(str(e))
                else:
                    st.success("Details saved")
    return project


def render_sidebar(store: AssessmentStore) -> Optional[Project]:
    st.sidebar.header("Projects")

    with st.sidebar.expander("New project", expanded=not store.list_projects()):
        with st.form("new_project", clear_on_submit=True):
            name = st.text_input("Project name", key="new_project_name")
            org = st.text_input("Organization", key="new_project_org")
            description = st.text_area("Description", key="new_project_description")
            if st.form_submit_button("Create project", key="create_project"):
                try:
                    project = store.create_project(name, org, description)
                except StoreException as e:
                    st.error(str(e))
                else:
                    # the picker is rendered below, so it can still be moved to the new project
                    st.session_state.project_picker = project.id

    projects: List[Project] = store.list_projects()
    if not projects:
        st.sidebar.info("Create a project to start an assessment.")
        return None

    by_id: Dict[str, Project] = {p.id: p for p in projects}
    ids = list(by_id)
    if st.session_state.get("project_picker") not in by_id:
        st.session_state.project_picker = ids[0]
    project_id = st.sidebar.selectbox(
        "Current project",
        ids,
        key="project_picker",
        format_func=lambda pid: f"{by_id[pid].name} ({by_id[pid].organization_name})",
    )
    project = by_id[project_id]

    status = st.sidebar.selectbox(
        "Status",
        list(PROJECT_STATUSES),
        index=PROJECT_STATUSES.index(project.status),
        format_func=lambda s: STATUS_LABELS[s],
        key=f"status_{project.id}",
    )
    if status != project.status:
        project = store.update_project_status(project.id, status)
    return render_project_details(store, project)


# ----------------------------
# Main app
# ----------------------------
def main():
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    st.set_page_config(page_title=settings.APP_NAME, layout="wide")

    st.title(settings.APP_NAME)
    st.caption(
        f"v{settings.APP_VERSION} · Answer questions across seven domains and review how your organization measures impact."
    )

    catalog = default_catalog()
    store = get_store()
    project = render_sidebar(store)

    tab1, tab2, tab3, tab4 = st.tabs(["Assessment", "Results", "Analytics", "Methodology"])

    with tab1:
        if project is None:
            st.info("Create or select a project in the sidebar.")
        else:
            render_assessment_tab(store, catalog, project)

    with tab2:
        if project is None:
            st.info("Create or select a project in the sidebar.")
        else:
            render_results_tab(store, catalog, project)

    with tab3:
        render_analytics_tab(store, catalog)

    # ---- Methodology ----
    with tab4:
        st.subheader("Methodology")
        st.write(
            "Each question is scored 0-10. Negatively phrased questions are inverted before saving, "
            "and the purpose alignment percentage is bucketed into deciles."
        )
        st.code(
            "Domain score = sum(answered scores) / answered questions\n"
            "Completion = answered questions / questions in domain * 100\n"
            "Overall score = mean of domain scores over started domains\n"
            "Rating: >= 8 Excellent, >= 6 Good, >= 4 Fair, otherwise Needs Improvement",
            language="text",
        )


if __name__ == "__main__":
    main()
