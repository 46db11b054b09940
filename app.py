"""motionpass -- Streamlit web interface."""

import streamlit as st

from motionpass import Authorization, CopyIndicator, GeneratorEngine

# ── Lucide icons (from lucide.dev) ────────────────────────────────────────

_LUCIDE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="{s}" height="{s}" '
    'viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" '
    'stroke-linecap="round" stroke-linejoin="round">{paths}</svg>'
)

ICON_WALLET = _LUCIDE.format(s=20, paths=(
    '<path d="M19 7V4a1 1 0 0 0-1-1H5a2 2 0 0 0 0 4h15a1 1 0 0 1 1 1v4h-3'
    'a2 2 0 0 0 0 4h3a1 1 0 0 0 1-1v-2a1 1 0 0 0-1-1"/>'
    '<path d="M3 5v14a2 2 0 0 0 2 2h15a1 1 0 0 0 1-1v-4"/>'
))

ICON_MOUSE = _LUCIDE.format(s=32, paths=(
    '<rect x="5" y="2" width="14" height="20" rx="7"/>'
    '<path d="M12 6v4"/>'
))

# ── Page config ───────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Movement Password Generator",
    page_icon="\U0001f5b1️",
    layout="centered",
)

# ── Session state ─────────────────────────────────────────────────────────

if "engine" not in st.session_state:
    st.session_state.engine = GeneratorEngine()
    st.session_state.copy_indicator = CopyIndicator(
        st.session_state.engine.config.copy_reset_delay,
    )

engine: GeneratorEngine = st.session_state.engine
indicator: CopyIndicator = st.session_state.copy_indicator


def _connect() -> None:
    address = st.session_state.get("wallet_address") or "0x0000000000"
    engine.set_authorization(Authorization(connected=True, address=address))


def _disconnect() -> None:
    engine.set_authorization(Authorization(connected=False))
    indicator.reset()


def _on_move() -> None:
    engine.feed.emit()


def _on_stir() -> None:
    engine.feed.emit(8)


def _on_copy() -> None:
    if engine.copy_text():
        indicator.mark_copied()


def _on_clear() -> None:
    engine.clear()
    indicator.reset()


# ── Header / wallet ───────────────────────────────────────────────────────

st.markdown(
    f'<h1 style="display:flex;align-items:center;gap:10px">'
    f'{ICON_MOUSE} Wallet-gated Password Generator</h1>',
    unsafe_allow_html=True,
)
st.caption(
    "Connect a wallet, start the generator, then move the pad to add "
    "characters.  \nGenerated passwords are **never** stored or sent anywhere."
)

auth = engine.authorization
with st.container(border=True):
    st.markdown(
        f'<p style="display:flex;align-items:center;gap:6px">'
        f'{ICON_WALLET} <strong>{auth.label if auth else "Wallet required"}</strong></p>',
        unsafe_allow_html=True,
    )
    if engine.authorized:
        st.button("Disconnect", on_click=_disconnect)
    else:
        st.text_input("Wallet address", key="wallet_address", placeholder="0x…")
        st.button("Connect wallet", type="primary", on_click=_connect)

# ── Generator card ────────────────────────────────────────────────────────

with st.container(border=True):
    status = "Generating" if engine.running else "Idle"
    color = "#388e3c" if engine.running else "#757575"
    st.markdown(
        f"**Movement-driven generator** &nbsp;·&nbsp; "
        f"<span style='color:{color}'>{status}</span>",
        unsafe_allow_html=True,
    )

    st.button(
        "Stop" if engine.running else "Start",
        on_click=engine.toggle,
        disabled=not engine.authorized,
        help=None if engine.authorized else "Connect your wallet to enable generator",
    )

    st.slider(
        "Movement pad",
        0, 100, 50,
        key="movement_pad",
        on_change=_on_move,
        disabled=not engine.running,
        help="Every movement of the pad adds one character.",
    )
    st.button("Stir (8 moves)", on_click=_on_stir, disabled=not engine.running)

    state = engine.snapshot()
    st.markdown("**Password preview**")
    if state.password:
        st.code(state.password, language=None)
    else:
        st.markdown("*(no password yet)*")

    st.markdown(
        f"Entropy: **{state.rounded_bits}** bits &nbsp;·&nbsp; "
        f"Estimated crack time: **{state.crack_time_label or '—'}**",
    )
    st.progress(state.length / engine.config.max_length)

    col1, col2 = st.columns(2)
    with col1:
        st.button("Copy", on_click=_on_copy, disabled=not state.password)
    with col2:
        st.button("Clear", on_click=_on_clear)

    # The indicator clears on a timer thread, which cannot trigger a rerun;
    # poll it from a fragment so "Copied!" disappears on its own.
    @st.fragment(run_every=0.5)
    def _copied_notice() -> None:
        if indicator.copied:
            st.success("Copied! Use the copy icon on the preview to send it to your clipboard.")

    _copied_notice()
