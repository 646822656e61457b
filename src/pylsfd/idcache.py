"""User-id to user-name cache."""

import pwd


class UsernameCache:
    """
    Memoised uid -> login name lookup.

    Uids without a passwd entry map to their decimal string, the way
    ls(1) and ps(1) show them.
    """

    def __init__(self) -> None:
        self._names: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._names)

    def get(self, uid: int) -> str:
        """Get the user name for a uid."""
        name = self._names.get(uid)
        if name is None:
            try:
                name = pwd.getpwuid(uid).pw_name
            except KeyError:
                name = str(uid)
            self._names[uid] = name
        return name

    def clear(self) -> None:
        """Forget every cached name."""
        self._names.clear()
