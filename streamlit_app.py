# streamlit_app.py
import time
import requests
import pandas as pd
import streamlit as st

from carquery.models import sql_heading

SAMPLE_QUESTIONS = [
    "List cars priced under 10000 euros from 2015 onwards",
    "Average price per brand for diesel cars",
    "Which automatic cars have no accident history and under 80000 km?",
]

# ---------- Page setup ----------
st.set_page_config(page_title="Cars NL to SQL", layout="wide")

st.markdown("""
    <style>
    .main .block-container {padding-top: 2rem; padding-bottom: 3rem; max-width: 1200px;}
    .small-muted {color:#6b7280; font-size:13px;}
    .section-title {font-weight:600; font-size: 18px; margin-top: 1rem;}
    </style>
""", unsafe_allow_html=True)

# ---------- Sidebar ----------
with st.sidebar:
    st.header("Connection")
    api_url = st.text_input("API base URL", value="http://127.0.0.1:8000")
    show_sql = st.checkbox("Show SQL", value=True)
    enable_csv = st.checkbox("Enable CSV download", value=True)
    st.markdown("<div class='small-muted'>Start the API with <code>uvicorn carquery.main:app --reload</code>.</div>", unsafe_allow_html=True)
    st.header("Try")
    for sample in SAMPLE_QUESTIONS:
        if st.button(sample, use_container_width=True):
            st.session_state.question = sample

if "history" not in st.session_state:
    st.session_state.history = []  # {question, sql, df, ms, ok, error}

st.title("Ask the Used Cars Database")
st.markdown("<div class='small-muted'>Questions are turned into SQL, checked for read-only safety, and run against a private copy of the cars table.</div>", unsafe_allow_html=True)

col_q, col_btn = st.columns([4, 1])
with col_q:
    question = st.text_input("Question", key="question", placeholder=SAMPLE_QUESTIONS[0])
with col_btn:
    run_clicked = st.button("Run", type="primary", use_container_width=True)

def ask(api: str, q: str) -> dict:
    """POST the question to /nl-query and normalize success and failure into one record."""
    t0 = time.perf_counter()
    entry = {"question": q, "sql": "", "df": pd.DataFrame(), "ok": False, "error": None}
    try:
        r = requests.post(api.rstrip("/") + "/nl-query", json={"question": q.strip()}, timeout=60)
    except requests.exceptions.RequestException as e:
        entry["error"] = str(e)
    else:
        try:
            body = r.json()
        except ValueError:
            body = {"error": r.text}
        entry["sql"] = body.get("sql") or ""
        if r.status_code == 200:
            # records keep the column order the database returned
            entry["df"] = pd.DataFrame.from_records(body.get("rows", []))
            entry["ok"] = True
        else:
            entry["error"] = body.get("error") or f"HTTP {r.status_code}"
    entry["ms"] = int((time.perf_counter() - t0) * 1000)
    return entry

def render(entry: dict, height: int):
    if entry["sql"] and (show_sql or not entry["ok"]):
        st.markdown(f"<div class='section-title'>{sql_heading(entry['error'])}</div>", unsafe_allow_html=True)
        st.code(entry["sql"], language="sql")
    if not entry["ok"]:
        st.code(str(entry["error"]))
    elif entry["df"].empty:
        st.info("No rows returned.")
    else:
        st.dataframe(entry["df"], use_container_width=True, height=height)

if run_clicked and question.strip():
    with st.spinner("Working…"):
        st.session_state.history.insert(0, ask(api_url, question))

# ---------- Latest result ----------
if st.session_state.history:
    latest = st.session_state.history[0]
    st.subheader("Result")
    st.markdown(f"<div class='small-muted'>{len(latest['df'])} row(s) in {latest['ms']} ms</div>", unsafe_allow_html=True)
    if not latest["ok"]:
        st.error("The request did not succeed.")
    render(latest, height=420)
    if latest["ok"] and enable_csv and not latest["df"].empty:
        csv = latest["df"].to_csv(index=False).encode("utf-8")
        st.download_button("Download CSV", data=csv, file_name="cars_result.csv", mime="text/csv")

# ---------- History ----------
st.subheader("History")
if not st.session_state.history:
    st.markdown("<div class='small-muted'>Your recent questions will appear here.</div>", unsafe_allow_html=True)
for i, item in enumerate(st.session_state.history[1:], start=2):
    status = "ok" if item["ok"] else "failed"
    with st.expander(f"{i}. {item['question']}  •  {status}  •  {item['ms']} ms"):
        render(item, height=260)
