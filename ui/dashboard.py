# ui/dashboard.py
import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import streamlit as st
import streamlit.components.v1 as components
import requests
import pandas as pd

from config import API_URL as DEFAULT_API_URL

# -------------------- CONFIG --------------------
STAGES = ["jobCollection", "jobReview", "candidateCollection", "aiAssessment", "finalReport"]
STAGE_LABELS = {
    "jobCollection": "1. Job",
    "jobReview": "2. Review KEC",
    "candidateCollection": "3. Candidates",
    "aiAssessment": "4. AI Assessment",
    "finalReport": "5. Final Report",
}
MAX_CANDIDATES = 3
PROFILE_STATS = ["experience", "teamSize", "budgetManaged", "noticePeriod", "salary", "yearsInIndustry"]
PROFILE_TEXT = ["title", "education", "location", "languages", "certification", "previousCompany", "managementStyle"]

st.set_page_config(page_title="Candidate Assessment", page_icon="📋", layout="wide")
st.title("📋 Candidate Assessment Wizard")

# -------------------- SESSION STATE --------------------
defaults = {
    "api_url": os.getenv("API_URL", DEFAULT_API_URL),
    "stage": "jobCollection",
    "job": None,
    "candidates": [],
    "report": None,
    "language": "en",
    "profile_fields": {"stats": PROFILE_STATS[:4], "text": PROFILE_TEXT[:2]},
}
for key, value in defaults.items():
    if key not in st.session_state:
        st.session_state[key] = value


def api(method: str, path: str, **kwargs):
    """Call the backend; show the error and stop the script on failure."""
    try:
        r = requests.request(method, f"{st.session_state.api_url}{path}", timeout=180, **kwargs)
    except requests.exceptions.RequestException as e:
        st.error(f"❌ Connection error: {e}")
        st.stop()
    if r.status_code >= 400:
        try:
            detail = r.json().get("detail", r.text)
        except ValueError:
            detail = r.text
        st.error(f"❌ {detail}")
        st.stop()
    return r


def go(stage: str):
    st.session_state.stage = stage
    st.rerun()


def upload_text(label: str, key: str) -> str:
    """Extract text from uploaded files through the API and join it."""
    files = st.file_uploader(label, type=["pdf", "docx", "txt", "md"], accept_multiple_files=True, key=key)
    texts = []
    for f in files or []:
        r = api("POST", "/documents/extract", files={"file": (f.name, f.getvalue(), f.type)})
        texts.append(r.json()["text"])
    return "\n\n".join(texts)


# -------------------- SIDEBAR / PROGRESS --------------------
with st.sidebar:
    st.session_state.language = st.selectbox(
        "Report language", ["en", "es"], index=["en", "es"].index(st.session_state.language)
    )
    if st.button("🔄 Start over"):
        for key in ("job", "report"):
            st.session_state[key] = None
        st.session_state.candidates = []
        go("jobCollection")

current = STAGES.index(st.session_state.stage)
st.progress((current + 1) / len(STAGES), text=" → ".join(
    f"**{STAGE_LABELS[s]}**" if i == current else STAGE_LABELS[s] for i, s in enumerate(STAGES)
))

stage = st.session_state.stage
job = st.session_state.job

# ==================== STEP 1: Job Collection ====================
if stage == "jobCollection":
    st.subheader("Job Information")
    prev = job or {}
    with st.form("job_form"):
        client_name = st.text_input("Client Name", value=prev.get("client_name", ""))
        role_title = st.text_input("Role Title", value=prev.get("role_title", ""))
        jd_text = st.text_area("Job Description", value=prev.get("job_description", ""), height=200)
        client_req = st.text_area("Client Requirements", value=prev.get("client_requirements") or "")
        meeting_notes = st.text_area("Meeting Notes", value=prev.get("meeting_notes") or "")
        recruiter_notes = st.text_area("Recruiter Notes", value=prev.get("recruiter_notes") or "")
        additional = st.text_area("Additional Notes", value=prev.get("additional_notes") or "")
        submitted = st.form_submit_button("Analyze Job ➜")
    uploaded = upload_text("📄 Attach job documents (optional)", "job_files")

    if submitted:
        if not jd_text.strip() and not uploaded:
            st.warning("Please enter or upload a job description.")
            st.stop()
        payload = {
            "client_name": client_name.strip(),
            "role_title": role_title.strip(),
            "job_description": "\n\n".join(t for t in (jd_text.strip(), uploaded) if t),
            "client_requirements": client_req,
            "meeting_notes": meeting_notes,
            "recruiter_notes": recruiter_notes,
            "additional_notes": additional,
        }
        if job:
            api("PATCH", f"/jobs/{job['id']}", json=payload)
            job_id = job["id"]
        else:
            job_id = api("POST", "/jobs", json=payload).json()["id"]
        with st.spinner("⏳ Identifying key evaluation criteria..."):
            r = api("POST", f"/jobs/{job_id}/analyze", json={"language": st.session_state.language})
        st.session_state.job = r.json()
        go("jobReview")

# ==================== STEP 2: Job Review ====================
elif stage == "jobReview":
    st.subheader("Review Key Evaluation Criteria")
    with st.form("review_form"):
        summary = st.text_area("Executive Summary", value=job.get("executive_summary") or "", height=180)
        items = []
        for i, item in enumerate(job.get("kec_items", [])):
            with st.expander(f"{item.get('icon', '')} {item['name']}", expanded=i == 0):
                name = st.text_input("Name", value=item["name"], key=f"kec_name_{i}")
                desc = st.text_area("Description", value=item.get("description", ""), key=f"kec_desc_{i}")
                c1, c2 = st.columns(2)
                level = c1.slider("Minimum requirement (%)", 0, 100, int(item.get("requirement_level") or 0), key=f"kec_lvl_{i}")
                weight = c2.number_input("Weight (%)", 0, 100, int(item.get("weight") or 0), key=f"kec_w_{i}")
                items.append({**item, "name": name, "description": desc,
                              "requirement_level": level, "weight": weight or None})
        total_weight = sum(i["weight"] or 0 for i in items)
        st.caption(f"Total weight: {total_weight}% (criteria without a weight get one when the report is built)")
        for flag in job.get("insight_flags", []):
            st.info(f"{flag.get('emoji', '')} **{flag.get('title', '')}**: {flag.get('description', '')}")
        col_prev, col_next = st.columns(2)
        back = col_prev.form_submit_button("⬅ Previous")
        saved = col_next.form_submit_button("Continue ➜")

    if back:
        go("jobCollection")
    if saved:
        names = [i["name"].strip() for i in items]
        if len(set(names)) != len(names):
            st.warning("Criteria names must be unique; scores are matched by name.")
            st.stop()
        r = api("PATCH", f"/jobs/{job['id']}", json={"executive_summary": summary, "kec_items": items})
        st.session_state.job = r.json()
        go("candidateCollection")

# ==================== STEP 3: Candidate Collection ====================
elif stage == "candidateCollection":
    st.subheader(f"Candidates (up to {MAX_CANDIDATES})")
    c1, c2 = st.columns(2)
    stats = c1.multiselect("Stat fields", PROFILE_STATS, default=st.session_state.profile_fields["stats"])
    text = c2.multiselect("Text fields", PROFILE_TEXT, default=st.session_state.profile_fields["text"])
    st.session_state.profile_fields = {"stats": stats, "text": text}

    existing = api("GET", f"/jobs/{job['id']}/candidates").json()
    for cand in existing:
        st.markdown(f"- 👤 **{cand['name']}** ({len(cand.get('resume') or '')} characters of material)")

    if len(existing) < MAX_CANDIDATES:
        with st.form("candidate_form", clear_on_submit=True):
            name = st.text_input("Candidate Name")
            resume = st.text_area("Resume / CV text", height=160)
            recruiter_notes = st.text_area("Recruiter Notes")
            meeting_notes = st.text_area("Meeting Notes")
            additional = st.text_area("Additional Info")
            profile = {f: st.text_input(f, key=f"profile_{f}") for f in stats + text}
            add = st.form_submit_button("➕ Add Candidate")
        uploaded = upload_text("📎 Candidate documents", f"cand_files_{len(existing)}")
        if add:
            if not name.strip():
                st.warning("Candidate name is required.")
                st.stop()
            payload = {
                "name": name.strip(),
                "resume": "\n\n".join(t for t in (resume.strip(), uploaded) if t),
                "recruiter_notes": recruiter_notes,
                "meeting_notes": meeting_notes,
                "additional_info": additional,
                "profile": {k: v for k, v in profile.items() if v},
            }
            api("POST", f"/jobs/{job['id']}/candidates", json=payload)
            st.rerun()

    col_prev, col_next = st.columns(2)
    if col_prev.button("⬅ Previous"):
        go("jobReview")
    if col_next.button("Run AI Assessment ➜", disabled=not existing):
        with st.spinner("⏳ Evaluating candidates..."):
            r = api("POST", f"/jobs/{job['id']}/evaluate", json={
                "language": st.session_state.language,
                "profile_fields": st.session_state.profile_fields,
            })
        st.session_state.candidates = r.json()
        go("aiAssessment")

# ==================== STEP 4: AI Assessment ====================
elif stage == "aiAssessment":
    st.subheader("AI Assessment")
    comparison = api("GET", f"/jobs/{job['id']}/comparison").json()

    if comparison["matrix"]:
        names = [t["candidate_name"] for t in comparison["totals"]]
        matrix = pd.DataFrame(
            [[f"{c['raw_score']:.1f} ({c['weighted_contribution']:.2f})" if c["has_data"] else "No data available"
              for c in row["cells"]] for row in comparison["matrix"]],
            index=[f"{row['parameter_name']} ({row['weight']:g}%)" for row in comparison["matrix"]],
            columns=names,
        )
        matrix.loc["Weighted Total"] = [
            f"{t['display_total']:.2f}" + (" 🥇" if t["is_winner"] else "") for t in comparison["totals"]
        ]
        st.table(matrix)

    for cand in st.session_state.candidates:
        ev = cand.get("ai_evaluation") or {}
        with st.expander(f"🧑 {cand['name']}"):
            st.markdown(ev.get("overall_assessment", ""))
            for s in ev.get("evaluation_scores", []):
                st.markdown(f"**{s['parameter_name']}**: {s['score']:g}%")
                st.caption(s.get("justification", ""))

    col_prev, col_next = st.columns(2)
    if col_prev.button("⬅ Previous"):
        go("candidateCollection")
    if col_next.button("Generate Final Report ➜"):
        with st.spinner("⏳ Writing report..."):
            r = api("POST", f"/jobs/{job['id']}/reports", json={"language": st.session_state.language})
        st.session_state.report = r.json()
        go("finalReport")

# ==================== STEP 5: Final Report ====================
elif stage == "finalReport":
    report = st.session_state.report
    reference = report["report_reference"]
    st.subheader(f"Final Report · Ref: {reference}")
    st.markdown(f"Shareable link: `{st.session_state.api_url}/reports/{reference}/html`")

    html = api("GET", f"/reports/{reference}/html").text
    pdf = api("GET", f"/reports/{reference}/pdf").content
    c1, c2 = st.columns(2)
    c1.download_button("⬇ Download HTML", data=html, file_name=f"{reference}.html", mime="text/html")
    c2.download_button("⬇ Download PDF", data=pdf, file_name=f"{reference}.pdf", mime="application/pdf")

    gaps = report["report_data"]["comparison"]["gaps"]
    if gaps:
        st.markdown("### 📉 Gap Analysis")
        gap_table = pd.DataFrame(
            [[f"{c['difference']:+g} ({c['level']})" if c["has_data"] else "No data available" for c in row]
             for row in gaps],
            index=[row[0]["parameter_name"] for row in gaps if row],
            columns=[c["candidate_name"] for c in gaps[0]],
        )
        st.table(gap_table)

    components.html(html, height=1600, scrolling=True)

    if st.button("⬅ Back to assessment"):
        go("aiAssessment")
