from __future__ import annotations

import json
from pathlib import Path
from typing import List

import streamlit as st

from l10n_browser.l10n_data import languages_frame, load_language_files
from l10n_common.config import ConfigError, load_config
from l10n_common.errors import ProtectedKeyError
from l10n_common.export import build_payloads, export_bundle
from l10n_common.mapping import suggest_mapping
from l10n_common.schema import SegmentationMode
from l10n_common.session import TranslationSession, dump_session_file, load_session_file

# Resolves to repo_root/l10n_config.yaml by default; editable in the sidebar.
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "l10n_config.yaml"
SESSION_KEY = "l10n_session"
UNASSIGNED = ""


def get_session() -> TranslationSession:
    """One TranslationSession per browser tab, kept in Streamlit session state."""

    session = st.session_state.get(SESSION_KEY)
    if session is None:
        config_path = Path(st.session_state.get("config_path", str(DEFAULT_CONFIG_PATH))).expanduser()
        try:
            config = load_config(config_path if config_path.exists() else None)
        except ConfigError as exc:
            st.error(f"Config error: {exc}")
            st.stop()
        session = TranslationSession(config)
        st.session_state[SESSION_KEY] = session
    return session


def _clear_widget_state(prefixes: List[str]) -> None:
    for key in list(st.session_state.keys()):
        if any(str(key).startswith(prefix) for prefix in prefixes):
            del st.session_state[key]


def render_sidebar(session: TranslationSession) -> None:
    st.sidebar.header("Workbooks")
    st.sidebar.text_input(
        "Config path",
        value=str(DEFAULT_CONFIG_PATH),
        key="config_path",
        help="YAML config; applied when the session is reset.",
    )
    if st.sidebar.button("Reset session", use_container_width=True):
        st.session_state.pop(SESSION_KEY, None)
        _clear_widget_state(["assign_", "toggle_", "game_name"])
        st.rerun()

    uploads = st.sidebar.file_uploader(
        "Language workbooks (<lang>.xlsx)",
        type=[ext.lstrip(".") for ext in session.config.file_extensions],
        accept_multiple_files=True,
        key="workbook_upload",
    )
    if uploads and st.sidebar.button("Load workbooks", use_container_width=True):
        with st.spinner("Reading workbooks..."):
            documents, report = load_language_files(((f.name, f) for f in uploads), session.config)
        for name, reason in report.skipped.items():
            st.sidebar.warning(f"Skipped {name}: {reason}")
        session.replace_languages(documents)
        _clear_widget_state(["assign_", "toggle_"])
        st.session_state["game_name"] = session.game_name

    st.sidebar.subheader("Session file (optional)")
    session_upload = st.sidebar.file_uploader("Upload session YAML/JSON", type=["yaml", "yml", "json"], key="session_upload")
    if session_upload is not None and st.sidebar.button("Apply session file", use_container_width=True):
        try:
            load_session_file(session, session_upload.getvalue())
        except ConfigError as exc:
            st.sidebar.error(f"Failed to load session file: {exc}")
        else:
            _clear_widget_state(["assign_", "toggle_"])
            st.session_state["game_name"] = session.game_name
    st.sidebar.download_button(
        label="Download session file",
        data=dump_session_file(session).encode("utf-8"),
        file_name="l10n_session.yaml",
        mime="application/x-yaml",
        use_container_width=True,
    )


def render_key_manager(session: TranslationSession) -> None:
    st.markdown("### Mapping keys")
    add_col, restore_col = st.columns([3, 1])
    with add_col:
        new_key = st.text_input("Add new key", key="new_key", placeholder="Add new key...")
        if st.button("Add key"):
            if session.add_key(new_key):
                st.rerun()
    with restore_col:
        if st.button("Restore default keys", use_container_width=True):
            session.restore_default_keys()
            st.rerun()

    pending = st.session_state.get("pending_remove")
    keys = session.registry.keys
    for index, key in enumerate(keys):
        label_col, up_col, down_col, remove_col = st.columns([6, 1, 1, 1])
        label = f"**{key}** (list)" if session.registry.is_accumulation(key) else f"**{key}**"
        label_col.markdown(label)
        if up_col.button("↑", key=f"key_up_{key}", disabled=index == 0):
            session.reorder_keys(index, index - 1)
            st.rerun()
        if down_col.button("↓", key=f"key_down_{key}", disabled=index == len(keys) - 1):
            session.reorder_keys(index, index + 1)
            st.rerun()
        if remove_col.button("✕", key=f"key_remove_{key}"):
            if session.registry.is_essential(key):
                st.warning(f'"{key}" is a core key and cannot be removed.')
            else:
                st.session_state["pending_remove"] = key
                st.rerun()

    if pending:
        st.warning(f'Remove key "{pending}" from all dropdowns? Headers mapped to it become unassigned.')
        confirm_col, cancel_col = st.columns(2)
        if confirm_col.button("Confirm removal"):
            try:
                session.remove_key(pending)
            except ProtectedKeyError as exc:
                st.error(str(exc))
            st.session_state.pop("pending_remove", None)
            _clear_widget_state(["assign_"])
            st.rerun()
        if cancel_col.button("Cancel"):
            st.session_state.pop("pending_remove", None)
            st.rerun()


def render_header_toggles(session: TranslationSession) -> None:
    flat = [lang for lang, doc in session.languages.items() if doc.mode is SegmentationMode.FLAT]
    if not flat:
        return
    st.markdown("### Header lines (unformatted workbooks)")
    st.caption("These workbooks have no bold rows. Tick the lines that start a new section.")
    for language in flat:
        document = session.languages[language]
        with st.expander(f"{language.upper()} ({len(document.rows)} lines)"):
            toggles = session.header_lines.get(language, set())
            for index, line in enumerate(document.lines):
                checked = st.checkbox(line, value=index in toggles, key=f"toggle_{language}_{index}")
                if checked != (index in toggles):
                    session.toggle_header(language, index)


def render_assignments(session: TranslationSession) -> None:
    reference = session.reference_language
    candidates = session.mapping_candidates()
    if reference is None or not candidates:
        return

    st.markdown(f"### Assign keys for {reference.upper()} file")
    if st.button("Suggest keys for unassigned headers"):
        unassigned = [seg.header for seg in candidates if session.mapping.get(seg.header) is None]
        for header, key in suggest_mapping(unassigned, session.registry.keys).items():
            if key:
                session.assign(header, key)
        _clear_widget_state(["assign_"])
        st.rerun()

    options = [UNASSIGNED, *session.registry.keys]
    for seg_index, segment in enumerate(candidates):
        with st.container(border=True):
            st.markdown(f"**{segment.header}**")
            for line_index, line in enumerate(segment.lines):
                text_col, delete_col = st.columns([12, 1])
                text_col.write(line)
                if delete_col.button("🗑", key=f"delete_{seg_index}_{line_index}"):
                    session.delete_line(seg_index, line_index)
                    _clear_widget_state(["toggle_"])
                    st.rerun()

            current = session.mapping.resolve(segment.header, session.registry) or UNASSIGNED
            choice = st.selectbox(
                "Assign to",
                options=options,
                index=options.index(current),
                format_func=lambda v: "--Assign to--" if v == UNASSIGNED else v,
                key=f"assign_{seg_index}_{segment.header}",
            )
            if choice != current:
                session.assign(segment.header, choice)
                st.rerun()


def render_output(session: TranslationSession) -> None:
    if not session.languages or not len(session.mapping):
        return

    st.markdown("### Final JSON output per language")
    st.dataframe(languages_frame(session).to_pandas(), use_container_width=True, hide_index=True)
    payloads = build_payloads(session)
    for language in session.languages:
        with st.expander(language.upper()):
            st.json(json.loads(payloads[f"{language}.json"]))

    result = export_bundle(session)
    if result is not None:
        name, data = result
        st.download_button(
            label="Export all JSON files",
            data=data,
            file_name=name,
            mime="application/zip",
        )


def main() -> None:
    st.set_page_config(page_title="Localization Sheets to JSON", layout="wide")
    st.title("Excel language folder to structured JSON")
    st.caption("Load one workbook per language, assign each section to a key, export one JSON per language.")

    session = get_session()
    render_sidebar(session)

    if not session.languages:
        st.info("Upload the language workbooks in the sidebar and click 'Load workbooks'.")

    st.session_state.setdefault("game_name", session.game_name)
    session.game_name = st.text_input("Game name", key="game_name")

    render_key_manager(session)
    render_header_toggles(session)
    render_assignments(session)
    render_output(session)


if __name__ == "__main__":
    main()
