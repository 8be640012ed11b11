"""
Streamlit Frontend for Account Manager

A thin shell over AccountManager. It renders data and forwards the four
host operations (load, save, import, storage location); all rules live in
the account_manager package.

The UI keeps secrets masked unless the user asks to reveal them.
"""

import streamlit as st

from account_manager.config import validate_all_settings
from account_manager.models.dataset import Dataset, FamilyGroup, FamilyMember, MemberRole
from account_manager.orchestrator import AccountManager, create_app_components
from account_manager.parsing import ImportFormatError, ImportMode, mask_value
from account_manager.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Account Manager",
    page_icon="🔐",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_manager() -> AccountManager:
    """Get or create the AccountManager (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    manager = get_manager()

    st.sidebar.title("🔐 Account Manager")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📥 Import", "👤 Accounts", "👪 Family Groups", "⚙️ Settings"],
        index=0,
    )

    try:
        dataset = manager.load()
    except StorageError as e:
        st.error(f"Could not load data: {e}")
        st.stop()

    if page == "📥 Import":
        render_import_page(manager)
    elif page == "👤 Accounts":
        render_accounts_page(dataset)
    elif page == "👪 Family Groups":
        render_groups_page(manager, dataset)
    elif page == "⚙️ Settings":
        render_settings_page(manager)


def render_import_page(manager: AccountManager):
    """Render the bulk import page."""
    st.title("📥 Import Accounts")
    st.markdown(
        "Paste account details below. Existing accounts are matched by login "
        "and only updated where the paste has a value."
    )

    modes = [mode.value for mode in ImportMode]
    mode = st.selectbox(
        "Format",
        modes,
        index=modes.index(manager.import_mode.value),
        help="freeform: best effort, one line per field. "
             "strict: login;password;token;app password;2FA url;messages url",
    )
    raw = st.text_area("Pasted text", height=300)

    if st.button("Import and merge", type="primary", disabled=not raw.strip()):
        try:
            result = manager.import_text(raw, mode=mode)
        except ImportFormatError as e:
            st.error(f"❌ Import rejected: {e}")
            return
        except StorageError as e:
            st.error(f"❌ Could not save: {e}")
            return

        if result.imported == 0:
            st.info("No accounts found in the pasted text.")
        else:
            st.success(
                f"✅ Imported {result.imported} "
                f"({result.created} new, {result.updated} updated)"
            )


def render_accounts_page(dataset: Dataset):
    """Render the account list."""
    st.title("👤 Accounts")

    query = st.text_input("Search", placeholder="login, phone or note")
    show_secrets = st.toggle("Show secrets", value=False)

    needle = query.strip().lower()
    rows = []
    for account in dataset.accounts:
        haystack = " ".join([account.login, account.phone, account.note]).lower()
        if needle and needle not in haystack:
            continue
        rows.append({
            "Login": account.login,
            "Password": account.password if show_secrets else mask_value(account.password),
            "2FA token": (
                account.authenticator_token if show_secrets
                else mask_value(account.authenticator_token)
            ),
            "App password": (
                account.app_password if show_secrets else mask_value(account.app_password)
            ),
            "Recovery": account.recovery_email,
            "Phone": account.phone,
            "2FA url": account.authenticator_url,
            "Note": account.note,
        })

    st.caption(f"{len(rows)} of {len(dataset.accounts)} accounts")
    st.dataframe(rows, use_container_width=True, hide_index=True)


def render_groups_page(manager: AccountManager, dataset: Dataset):
    """Render and edit family groups."""
    st.title("👪 Family Groups")

    logins = {account.id: account.login for account in dataset.accounts}

    for group in dataset.groups:
        with st.expander(f"{group.name} ({len(group.members)} members)"):
            if group.note:
                st.markdown(group.note)
            for member in group.members:
                label = "Admin" if member.is_admin else "Member"
                st.markdown(f"- **{label}**: {logins.get(member.account_id, member.account_id)}")

    st.markdown("---")
    st.subheader("Create group")

    with st.form("new_group"):
        name = st.text_input("Name")
        note = st.text_area("Note")
        admin_id = st.selectbox(
            "Admin",
            [""] + list(logins),
            format_func=lambda account_id: logins.get(account_id, "(none)"),
        )
        member_ids = st.multiselect(
            "Members",
            list(logins),
            format_func=lambda account_id: logins[account_id],
        )
        submitted = st.form_submit_button("Save group", type="primary")

    if submitted:
        members = []
        if admin_id:
            members.append(FamilyMember(account_id=admin_id, role=MemberRole.ADMIN.value))
        members.extend(
            FamilyMember(account_id=account_id, role=MemberRole.MEMBER.value)
            for account_id in member_ids
        )
        updated = dataset.model_copy(deep=True)
        updated.groups.append(FamilyGroup(name=name, note=note, members=members))
        try:
            manager.save(updated)
        except StorageError as e:
            st.error(f"❌ Could not save: {e}")
            return
        st.success("✅ Group saved. Accounts already in another group were left there.")
        st.rerun()


def render_settings_page(manager: AccountManager):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Data file")
    st.code(manager.storage_location())

    st.markdown("### Configuration status")
    status = validate_all_settings()
    for name in ("storage", "imports", "app"):
        if status.get(name, False):
            st.success(f"✅ {name}")
        else:
            st.error(f"❌ {name} - {status.get(f'{name}_error', 'Invalid')}")

    st.markdown("### Recent activity")
    for event in reversed(manager.audit_logger.events):
        st.markdown(f"- `{event.timestamp:%H:%M:%S}` {event.description}")


if __name__ == "__main__":
    main()
