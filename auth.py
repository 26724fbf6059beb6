import hashlib
import hmac

import streamlit as st

import settings


def password_matches(password: str, expected_hash) -> bool:
    if not password or not expected_hash:
        return False
    digest = hashlib.sha256(password.encode()).hexdigest()
    return hmac.compare_digest(digest, expected_hash.lower())


def check_password():
    """Unlocks saving for this session; open when no password hash is configured."""
    if not settings.APP_PASSWORD_HASH:
        return True

    if "auth" not in st.session_state:
        st.session_state.auth = False

    if st.session_state.auth:
        return True

    pwd = st.text_input("Enter password to enable saving", type="password")
    if pwd:
        if password_matches(pwd, settings.APP_PASSWORD_HASH):
            st.session_state.auth = True
            st.success("Saving unlocked")
            return True
        else:
            st.error("Incorrect password")

    return False
