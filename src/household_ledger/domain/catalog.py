from household_ledger.models import Category, UserProfile

USERS: tuple[UserProfile, ...] = (
    UserProfile(
        user_id="ray",
        name="Ray",
        display_name="น้องเรย์",
        avatar="/static/avatars/ray.svg",
        initial="R",
    ),
    UserProfile(
        user_id="bon",
        name="Bon",
        display_name="นายอัครเดชสุขสมพร",
        avatar="/static/avatars/bon.svg",
        initial="B",
    ),
)

CATEGORIES: tuple[Category, ...] = (
    Category(key="general", label="General"),
    Category(key="food", label="Food"),
    Category(key="transport", label="Transport"),
    Category(key="lodging", label="Lodging"),
    Category(key="equipment", label="Equipment"),
    Category(key="medical", label="Medical"),
    Category(key="salary", label="Salary"),
    Category(key="cosmetics", label="Cosmetics"),
    Category(key="gift", label="Gift"),
)

DEFAULT_CATEGORY = "general"

_USERS_BY_ID = {user.user_id: user for user in USERS}
_CATEGORY_KEYS = frozenset(category.key for category in CATEGORIES)


def get_user(user_id: str | None) -> UserProfile | None:
    if not user_id:
        return None
    return _USERS_BY_ID.get(user_id)


def resolve_user(user_id: str | None, default: str) -> UserProfile:
    """Return the profile for ``user_id``, falling back to ``default`` and then the first user."""
    return get_user(user_id) or get_user(default) or USERS[0]


def is_known_category(key: str) -> bool:
    return key in _CATEGORY_KEYS
