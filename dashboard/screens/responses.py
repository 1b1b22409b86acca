from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import pandas as pd
import streamlit as st

from dashboard.utils.api_client import (
    api_get_form_responses_csv,
    api_get_forms,
    api_get_responses,
    api_get_responses_csv,
)
from dashboard.utils.formatters import flatten_responses


def fetch_export(
    api_base: str,
    user_id: str,
    form_id: Optional[str],
    q: str,
    titles: Dict[str, str],
    default_name: str,
) -> Tuple[str, str]:
    """
    CSV text and download name for the current view. A single form without a
    search uses the per-form export; anything filtered by text goes through
    the owner-wide export so the rows match the table.
    """
    if form_id and not q:
        title = titles.get(form_id, "form")
        return api_get_form_responses_csv(api_base, user_id, form_id), f"{title}-responses.csv"
    return api_get_responses_csv(api_base, user_id, form_id=form_id, q=q), default_name


def render_responses_page(cfg: Dict[str, Any], *, api_base: str, user_id: str):
    st.subheader("Responses")

    try:
        forms = api_get_forms(api_base, user_id)
    except Exception as e:
        st.error(f"Failed to fetch forms: {type(e).__name__}: {e}")
        return

    titles = {"all": "All forms"}
    titles.update({f["id"]: f["title"] for f in forms})

    top = st.columns([1.6, 2.8, 1.0])
    with top[0]:
        form_id = st.selectbox("Form", list(titles.keys()), format_func=lambda k: titles[k], index=0)
    with top[1]:
        q = st.text_input("Search (form title / answers)", value="")
    with top[2]:
        if st.button("Refresh", use_container_width=True):
            st.cache_data.clear()
            st.rerun()

    selected = None if form_id == "all" else form_id

    try:
        data = api_get_responses(api_base, user_id, form_id=selected, q=q.strip())
    except Exception as e:
        st.error(f"Failed to fetch responses: {type(e).__name__}: {e}")
        return

    stats = data.get("stats") or {}
    c1, c2, c3 = st.columns(3)
    c1.metric("Total responses", stats.get("total_responses", 0))
    c2.metric("This week", stats.get("this_week", 0))
    c3.metric("Avg rating", stats.get("avg_rating", 0))

    items = data.get("items", [])
    if not items:
        st.info("No responses yet." if not stats.get("total_responses") else "No matching responses.")
        return

    df = pd.DataFrame(flatten_responses(items))
    st.dataframe(df, use_container_width=True, hide_index=True)

    default_name = str(cfg.get("export", {}).get("file_name", "feedback-responses.csv"))
    try:
        csv_text, file_name = fetch_export(api_base, user_id, selected, q.strip(), titles, default_name)
    except Exception as e:
        st.error(f"Failed to export responses: {type(e).__name__}: {e}")
        return

    st.download_button("Export CSV", data=csv_text, file_name=file_name, mime="text/csv")
