import streamlit as st

import auth
import components
import storage
import voting


OTHER = "Other (add my college)"

cache = components.get_cache()

st.title("🎬 Festival Vote")
st.caption(
    "The official platform for the Film Festival. Represent your college, "
    "rate documentaries, and earn rewards."
)

universities = components.cached_universities()
by_label = {uni["name"]: uni for uni in universities}

name = st.text_input("Your name", placeholder="e.g. Rahul Sharma")
email = st.text_input("Email", placeholder="rahul@example.com")
choice = st.selectbox(
    "Your college",
    options=list(by_label) + [OTHER],
    index=None,
    placeholder="Search your college...",
)

new_name = new_location = ""
if choice == OTHER:
    new_name = st.text_input("College name")
    new_location = st.text_input("City")
elif choice:
    st.caption(f"🎓 You are representing {choice}")

is_valid = (
    bool(name.strip())
    and voting.is_valid_email(email)
    and (choice in by_label or (choice == OTHER and bool(new_name.strip())))
)

if st.button("Start Voting →", type="primary", disabled=not is_valid, width="stretch"):
    with st.spinner("Setting up your profile..."):
        university = by_label.get(choice)
        if choice == OTHER:
            university = auth.add_new_university(new_name, new_location)
            components.cached_universities.clear()
            if university is None:
                st.warning("Could not add your college right now. You can pick it later from your profile.")

        cache.set(storage.HAS_ONBOARDED, True)
        cache.set(storage.USER_NAME, name.strip())
        cache.set(storage.USER_EMAIL, auth.normalize_email(email))
        if university:
            cache.set(storage.USER_UNIVERSITY_ID, university["id"])
            cache.set(storage.USER_UNIVERSITY_NAME, university["name"])
            cache.set(storage.IS_STUDENT, True)
        else:
            cache.set(storage.IS_STUDENT, False)

        auth.register_new_user(email, name.strip(), university["id"] if university else None)
        auth.sync_user_profile(email, cache)
    st.switch_page("views/home_page.py")
