from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Tuple

import streamlit as st
import yaml

# --- Ensure repo root is on PYTHONPATH so "import dashboard.*" works ---
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

CONFIG_PATH = Path("dashboard/config.yaml")


@st.cache_data(show_spinner=False)
def load_config() -> Dict[str, Any]:
    if not CONFIG_PATH.exists():
        return {}
    return yaml.safe_load(CONFIG_PATH.read_text(encoding="utf-8")) or {}


def cfg_get(cfg: Dict[str, Any], *keys: str, default=None):
    cur: Any = cfg
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def sidebar(cfg: Dict[str, Any]) -> Tuple[str, str, str]:
    st.sidebar.header("Settings")

    api_base = str(cfg_get(cfg, "api", "base_url", default="http://127.0.0.1:8000")).rstrip("/")
    st.sidebar.text_input("API base URL", value=api_base, key="api_base")

    # the gateway normally injects this; the dashboard asks for it directly
    user_id = str(cfg_get(cfg, "api", "user_id", default=""))
    st.sidebar.text_input("User id", value=user_id, key="user_id")

    st.sidebar.divider()
    page = st.sidebar.radio("Pages", ["Overview", "Responses"], index=0)

    return page, st.session_state["api_base"].rstrip("/"), st.session_state["user_id"].strip()


def main():
    st.set_page_config(page_title="Feedback Forms", layout="wide")
    cfg = load_config()

    st.title(cfg_get(cfg, "app", "title", default="Feedback Forms"))

    page, api_base, user_id = sidebar(cfg)
    if not user_id:
        st.info("Enter your user id in the sidebar to load your forms.")
        return

    if page == "Overview":
        from dashboard.screens.overview import render_overview_page
        render_overview_page(cfg, api_base=api_base, user_id=user_id)
    else:
        from dashboard.screens.responses import render_responses_page
        render_responses_page(cfg, api_base=api_base, user_id=user_id)


if __name__ == "__main__":
    main()
