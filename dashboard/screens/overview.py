from __future__ import annotations

from typing import Any, Dict

import pandas as pd
import streamlit as st

from dashboard.utils.api_client import api_get_dashboard, api_get_forms, api_set_form_active


def render_overview_page(cfg: Dict[str, Any], *, api_base: str, user_id: str):
    st.subheader("Overview")

    try:
        s = api_get_dashboard(api_base, user_id)
    except Exception as e:
        st.error(f"API not reachable: {type(e).__name__}: {e}")
        return

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total forms", s.get("total_forms", 0))
    c2.metric("Total responses", s.get("total_responses", 0))
    c3.metric("This month", s.get("this_month", 0))
    c4.metric("Avg rating", s.get("avg_rating", 0))

    c5, c6, c7 = st.columns(3)
    c5.metric("Active forms", s.get("active_forms_count", 0))
    c6.metric("Avg responses / form", s.get("avg_responses_per_form", 0))
    top = s.get("top_performing_form") or {}
    c7.metric("Top form", top.get("title", "—"), help=f"{top.get('responses', 0)} responses" if top else None)

    st.markdown("---")
    left, right = st.columns([1.4, 1.0], vertical_alignment="top")

    with left:
        st.markdown("### Responses, last 7 days")
        trend = s.get("trend") or []
        if trend:
            df = pd.DataFrame(trend).set_index("date")
            st.bar_chart(df["count"])
        else:
            st.info("No responses yet.")

    with right:
        st.markdown("### Recent forms")
        recent = s.get("recent_forms") or []
        if not recent:
            st.info("No forms yet.")
        for f in recent:
            st.write(f"**{f['title']}** · {f['responses']} responses · {f['created']}")

    st.markdown("---")
    st.markdown("### Forms")
    try:
        forms = api_get_forms(api_base, user_id)
    except Exception as e:
        st.error(f"Failed to fetch forms: {type(e).__name__}: {e}")
        return

    if not forms:
        st.info("No forms yet.")
        return

    for f in forms:
        cols = st.columns([3.0, 1.0, 1.0, 1.2])
        cols[0].write(f"**{f['title']}**  \n{f['public_url']}")
        cols[1].write(f["status"])
        cols[2].write(f"{f['responses']} responses")
        label = "Deactivate" if f["is_active"] else "Activate"
        if cols[3].button(label, key=f"toggle_{f['id']}", use_container_width=True):
            api_set_form_active(api_base, user_id, f["id"], not f["is_active"])
            st.rerun()
