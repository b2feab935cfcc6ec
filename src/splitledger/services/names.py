from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping, Optional

from splitledger.models import UserProfile


SELF_LABEL = "You"
UNKNOWN_LABEL = "?"


def build_name_map(
    user_ids: Iterable[str],
    profiles: Mapping[str, UserProfile],
    me: Optional[str] = None,
) -> dict[str, str]:
    """Display labels for ``user_ids``.

    Two people sharing a display name are told apart by the first five
    characters of their email's local part, e.g. ``"Sam (sam.k)"``.
    """
    user_ids = list(dict.fromkeys(user_ids))
    counts = Counter(
        profiles[user_id].display_name if user_id in profiles else UNKNOWN_LABEL
        for user_id in user_ids
        if user_id != me
    )

    names: dict[str, str] = {}
    for user_id in user_ids:
        if user_id == me:
            names[user_id] = SELF_LABEL
            continue
        profile = profiles.get(user_id)
        if profile is None:
            names[user_id] = UNKNOWN_LABEL
            continue
        name = profile.display_name
        if counts[name] > 1 and profile.email:
            names[user_id] = f"{name} ({profile.email.split('@')[0][:5]})"
        else:
            names[user_id] = name
    return names
