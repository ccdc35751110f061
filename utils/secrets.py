import logging
import os

import streamlit as st

log = logging.getLogger(__name__)

SECRETS_SECTION = "workout_tracker"


def get_secret(key: str, default=None):
    """
    Look up a setting in Streamlit secrets ([workout_tracker] section first,
    then top level), falling back to the environment.
    """
    try:
        section = st.secrets.get(SECRETS_SECTION, {})
        if key in section:
            return section[key]
        if key in st.secrets:
            return st.secrets[key]
    except FileNotFoundError as exc:
        # no secrets.toml; StreamlitSecretNotFoundError is a subclass
        log.debug("No Streamlit secrets for %s: %s", key, exc)
    return os.getenv(key, default)
