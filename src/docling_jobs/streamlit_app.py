import os
import time
from typing import Optional

import requests
import streamlit as st

API_BASE = os.getenv("DOC_SERVICE_API_BASE", os.getenv("API_BASE", "http://localhost:8080")).rstrip("/")
POLL_INTERVAL = float(os.getenv("DOC_SERVICE_UI_POLL_INTERVAL", "1.5"))


def _reset_state():
    for key in [
        "job_id",
        "state",
        "result_text",
        "error",
    ]:
        if key in st.session_state:
            del st.session_state[key]


def submit_job(source: str, page_range: Optional[tuple[int, int]] = None) -> tuple[Optional[str], Optional[str]]:
    """POST a conversion job. Returns (job_id, error)."""
    payload: dict[str, object] = {"source": source}
    if page_range is not None:
        payload["page_range"] = list(page_range)
    try:
        resp = requests.post(f"{API_BASE}/jobs", json=payload, timeout=30)
    except requests.RequestException as e:
        return None, f"Failed to connect to API: {e}"
    if resp.status_code != 202:
        return None, f"Submit failed: {resp.status_code} {resp.text}"
    return str(resp.json().get("id")), None


def poll_status(job_id: str, *, max_attempts: int = 5, backoff: float = 0.5) -> tuple[Optional[dict], Optional[str]]:
    """GET the job status, retrying transient errors. Returns (job, error)."""
    last_text = ""
    for attempt in range(1, max_attempts + 1):
        try:
            resp = requests.get(f"{API_BASE}/jobs/{job_id}", timeout=30)
        except requests.RequestException as e:
            last_text = str(e)
            # network error: backoff and retry
            if attempt < max_attempts:
                time.sleep(backoff)
                backoff *= 1.5
                continue
            return None, f"Status check failed: {e}"
        last_text = resp.text
        if resp.status_code == 200:
            return resp.json(), None
        # 404 is definitive: the service forgets jobs only on restart
        if resp.status_code in {429, 503} or 500 <= resp.status_code < 600:
            if attempt < max_attempts:
                time.sleep(backoff)
                backoff *= 1.5
                continue
        return None, f"Status error: {resp.status_code} {last_text}"
    return None, f"Status error after retries: {last_text}"


def fetch_result(job_id: str) -> tuple[Optional[str], Optional[str]]:
    """GET the Markdown result. Returns (markdown, error)."""
    try:
        resp = requests.get(f"{API_BASE}/jobs/{job_id}/result", timeout=60)
    except requests.RequestException as e:
        return None, f"Download failed: {e}"
    if resp.status_code == 200:
        return str(resp.json().get("result", "")), None
    if resp.status_code == 202:
        return None, "Job is still being processed"
    try:
        detail = resp.json().get("detail", {})
        message = detail.get("error") or detail.get("message") or resp.text
    except ValueError:
        message = resp.text
    return None, f"Download error: {resp.status_code} {message}"


def main() -> None:
    st.set_page_config(page_title="Docling Job Service", page_icon="📄", layout="centered")
    st.title("📄 Docling Job Service")
    st.caption(f"API base: {API_BASE}")

    if st.button("Restart", type="secondary"):
        _reset_state()
        st.rerun()

    source = st.text_input("Document URL or path", placeholder="https://arxiv.org/pdf/2206.01062")
    limit_pages = st.checkbox("Limit page range")
    page_range = None
    if limit_pages:
        col1, col2 = st.columns([1, 1])
        with col1:
            start = st.number_input("First page", min_value=1, value=1, step=1)
        with col2:
            end = st.number_input("Last page", min_value=1, value=max(int(start), 1), step=1)
        page_range = (int(start), int(end))

    # Start job
    if source and "job_id" not in st.session_state and st.button("Start Conversion", type="primary"):
        if page_range is not None and page_range[1] < page_range[0]:
            st.error("Last page must not come before the first page")
        else:
            with st.spinner("Submitting job..."):
                job_id, err = submit_job(source, page_range)
            if job_id:
                st.session_state["job_id"] = job_id
                st.session_state["state"] = "pending"
                st.toast("Job created", icon="✅")
            else:
                st.session_state["error"] = err

    # Show status and poll if job exists
    if "job_id" in st.session_state and "result_text" not in st.session_state:
        job_id = st.session_state["job_id"]
        with st.status("Tracking job status...", expanded=True) as status_box:
            # Use a placeholder to avoid accumulating multiple messages
            text_slot = st.empty()
            while True:
                data, err = poll_status(job_id)
                if not data:
                    st.session_state["error"] = err
                    break
                st.session_state["state"] = str(data.get("state", "unknown"))
                text_slot.write(f"State: {st.session_state['state']}")

                if st.session_state["state"] == "completed":
                    status_box.update(label="Job completed", state="complete")
                    break
                if st.session_state["state"] == "failed":
                    status_box.update(label="Job failed", state="error")
                    st.session_state["error"] = f"Conversion failed: {data.get('error')}"
                    break
                time.sleep(POLL_INTERVAL)

        # On completion, try to fetch result
        if st.session_state.get("state") == "completed":
            with st.spinner("Fetching result..."):
                text, err = fetch_result(job_id)
            if text is not None:
                st.session_state["result_text"] = text
            else:
                st.session_state["error"] = err

    # Show result download and preview
    if "result_text" in st.session_state:
        st.success("Conversion complete!")
        md = st.session_state["result_text"]
        st.download_button(
            label="Download Markdown",
            data=md.encode("utf-8"),
            file_name="conversion.md",
            mime="text/markdown",
        )
        with st.expander("Preview"):
            st.markdown(md)

    if err := st.session_state.get("error"):
        st.error(err)


if __name__ == "__main__":
    main()
