"""
Cache Value Objects

Immutable value objects for the cache domain.
Cache keys and invalidation patterns are built from the same scope helpers,
so every key falls under the pattern that is meant to invalidate it.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Pattern, Union
from urllib.parse import quote

Identifier = Union[str, int]

MAX_TTL_SECONDS = 86400 * 365

_GLOB_SPECIAL = "*?[]\\"


def escape_glob(text: str) -> str:
    """Escape glob metacharacters so ``text`` matches only itself."""
    return "".join("\\" + char if char in _GLOB_SPECIAL else char for char in text)


def compile_glob(pattern: str) -> Pattern[str]:
    """
    Translate a Redis-style glob into a compiled regular expression.

    Supports ``*``, ``?``, ``[abc]``, ``[^abc]``, ``[a-z]`` and backslash
    escapes. Use ``fullmatch`` on the result.
    """
    parts = []
    i, length = 0, len(pattern)

    while i < length:
        char = pattern[i]

        if char == "\\" and i + 1 < length:
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue

        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "[":
            end = pattern.find("]", i + 1)
            body = pattern[i + 1 : end] if end != -1 else ""
            negate = body.startswith("^")
            if negate:
                body = body[1:]
            if end == -1 or not body:
                parts.append(re.escape(char))
            else:
                body = "".join("\\" + c if c in "\\[" else c for c in body)
                parts.append(f"[{'^' if negate else ''}{body}]")
                i = end + 1
                continue
        else:
            parts.append(re.escape(char))
        i += 1

    return re.compile("".join(parts), re.DOTALL)


def _component(value: Identifier) -> str:
    """Encode a caller-supplied key component (no whitespace, no glob chars)."""
    text = str(value).strip()
    if not text:
        raise ValueError("Cache key component cannot be empty")
    return quote(text, safe="-.")


def _epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _query(query: Optional[str]) -> str:
    if query is None or not query.strip():
        return ""
    return f"_query_{_component(query)}"


def _user_scope(user_id: Identifier, section: str = "") -> str:
    """Shared prefix for every per-user key and pattern."""
    return f"user_{_component(user_id)}_{section}"


# Sections shared by key and pattern builders
CREATED_RECIPES = "created_recipes"
SAVED_RECIPES = "saved_recipes"
FAVORITED_RECIPES = "favorited_recipes"
MEALS = "meals"
PLANS = "plans"
CUISINE_PREFERENCES = "cuisine_preferences"
DIET_PREFERENCES = "diet_preferences"
DISH_TYPE_PREFERENCES = "dish_type_preferences"


def _check_text(value: str, kind: str) -> None:
    # Opaque to the cache; raw keys may carry spaces from search text
    if not isinstance(value, str) or not value:
        raise ValueError(f"{kind} cannot be empty")


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Opaque to the cache coordinator; callers encode every parameter that
    affects the cached value into it.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate cache key format."""
        _check_text(self.value, "Cache key")

    @classmethod
    def coerce(cls, key: Union[str, "CacheKey"]) -> "CacheKey":
        """Accept either a raw string or an existing key."""
        return key if isinstance(key, CacheKey) else cls(key)

    # Recipe counts (dashboard)

    @classmethod
    def created_recipes_count(cls, user_id: Identifier) -> "CacheKey":
        """Number of recipes a user created."""
        return cls(_user_scope(user_id, f"{CREATED_RECIPES}_count"))

    @classmethod
    def saved_recipes_count(cls, user_id: Identifier) -> "CacheKey":
        """Number of recipes a user saved."""
        return cls(_user_scope(user_id, f"{SAVED_RECIPES}_count"))

    @classmethod
    def favorited_recipes_count(cls, user_id: Identifier) -> "CacheKey":
        """Number of recipes a user favorited."""
        return cls(_user_scope(user_id, f"{FAVORITED_RECIPES}_count"))

    # Recipe lists (user profile pages)

    @classmethod
    def _recipe_list(
        cls, user_id: Identifier, section: str, offset: int, limit: Optional[int]
    ) -> "CacheKey":
        if offset < 0:
            raise ValueError("Offset cannot be negative")
        suffix = f"_limit_{limit}" if limit else ""
        return cls(_user_scope(user_id, f"{section}_list_offset_{offset}{suffix}"))

    @classmethod
    def created_recipes_list(
        cls, user_id: Identifier, offset: int = 0, limit: Optional[int] = None
    ) -> "CacheKey":
        return cls._recipe_list(user_id, CREATED_RECIPES, offset, limit)

    @classmethod
    def saved_recipes_list(
        cls, user_id: Identifier, offset: int = 0, limit: Optional[int] = None
    ) -> "CacheKey":
        return cls._recipe_list(user_id, SAVED_RECIPES, offset, limit)

    @classmethod
    def favorited_recipes_list(
        cls, user_id: Identifier, offset: int = 0, limit: Optional[int] = None
    ) -> "CacheKey":
        return cls._recipe_list(user_id, FAVORITED_RECIPES, offset, limit)

    # Meals

    @classmethod
    def meals_count(
        cls,
        user_id: Identifier,
        query: Optional[str] = None,
        max_calories: int = 0,
        page: int = 1,
    ) -> "CacheKey":
        """Filtered meal count for one results page."""
        calories = f"_max_calories_{max_calories}" if max_calories > 0 else ""
        return cls(
            _user_scope(user_id, f"{MEALS}_count{_query(query)}{calories}_page_{page}")
        )

    # Plans

    @classmethod
    def upcoming_plan(cls, user_id: Identifier) -> "CacheKey":
        """Next upcoming plan shown on the dashboard."""
        return cls(_user_scope(user_id, f"{PLANS}_upcoming"))

    @classmethod
    def plans_preview(
        cls, user_id: Identifier, start_date: datetime, end_date: datetime
    ) -> "CacheKey":
        return cls(
            _user_scope(
                user_id,
                f"{PLANS}_preview_{_epoch_ms(start_date)}_to_{_epoch_ms(end_date)}",
            )
        )

    @classmethod
    def plans_count(
        cls,
        user_id: Identifier,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        query: Optional[str] = None,
    ) -> "CacheKey":
        section = f"{PLANS}_count"
        if start_date:
            section += f"_{_epoch_ms(start_date)}"
        if end_date:
            section += f"_to_{_epoch_ms(end_date)}"
        return cls(_user_scope(user_id, section + _query(query)))

    @classmethod
    def plans_detailed(
        cls,
        user_id: Identifier,
        plan_id: Optional[Identifier] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        query: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> "CacheKey":
        section = f"{PLANS}_detailed"
        if plan_id is not None:
            section += f"_plan_{_component(plan_id)}"
        if start_date:
            section += f"_{_epoch_ms(start_date)}"
        if end_date:
            section += f"_to_{_epoch_ms(end_date)}"
        section += _query(query)
        if limit:
            section += f"_limit_{limit}"
        if offset:
            section += f"_offset_{offset}"
        return cls(_user_scope(user_id, section))

    # Preferences

    @classmethod
    def cuisine_preferences(cls, user_id: Identifier) -> "CacheKey":
        return cls(_user_scope(user_id, CUISINE_PREFERENCES))

    @classmethod
    def diet_preferences(cls, user_id: Identifier) -> "CacheKey":
        return cls(_user_scope(user_id, DIET_PREFERENCES))

    @classmethod
    def dish_type_preferences(cls, user_id: Identifier) -> "CacheKey":
        return cls(_user_scope(user_id, DISH_TYPE_PREFERENCES))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class InvalidationPattern:
    """
    Glob pattern selecting the cache keys to evict after a mutation.

    Builders mirror the CacheKey builders section by section.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate pattern format."""
        _check_text(self.value, "Invalidation pattern")

    @classmethod
    def coerce(
        cls, pattern: Union[str, "InvalidationPattern"]
    ) -> "InvalidationPattern":
        return pattern if isinstance(pattern, InvalidationPattern) else cls(pattern)

    @classmethod
    def exact(cls, key: Union[str, CacheKey]) -> "InvalidationPattern":
        """Pattern matching exactly one key."""
        return cls(escape_glob(str(key)))

    @classmethod
    def user(cls, user_id: Identifier) -> "InvalidationPattern":
        """Every cached entry belonging to a user."""
        return cls(escape_glob(_user_scope(user_id)) + "*")

    @classmethod
    def _section(cls, user_id: Identifier, section: str) -> "InvalidationPattern":
        return cls(escape_glob(_user_scope(user_id, section)) + "*")

    @classmethod
    def created_recipes(cls, user_id: Identifier) -> "InvalidationPattern":
        return cls._section(user_id, CREATED_RECIPES)

    @classmethod
    def saved_recipes(cls, user_id: Identifier) -> "InvalidationPattern":
        return cls._section(user_id, SAVED_RECIPES)

    @classmethod
    def favorited_recipes(cls, user_id: Identifier) -> "InvalidationPattern":
        return cls._section(user_id, FAVORITED_RECIPES)

    @classmethod
    def meals(cls, user_id: Identifier) -> "InvalidationPattern":
        return cls._section(user_id, MEALS)

    @classmethod
    def plans(cls, user_id: Identifier) -> "InvalidationPattern":
        """All plan keys, including the dashboard's upcoming plan."""
        return cls._section(user_id, PLANS)

    @classmethod
    def cuisine_preferences(cls, user_id: Identifier) -> "InvalidationPattern":
        return cls.exact(CacheKey.cuisine_preferences(user_id))

    @classmethod
    def diet_preferences(cls, user_id: Identifier) -> "InvalidationPattern":
        return cls.exact(CacheKey.diet_preferences(user_id))

    @classmethod
    def dish_type_preferences(cls, user_id: Identifier) -> "InvalidationPattern":
        return cls.exact(CacheKey.dish_type_preferences(user_id))

    def matches(self, key: Union[str, CacheKey]) -> bool:
        """Check whether a concrete key falls under this pattern."""
        return compile_glob(self.value).fullmatch(str(key)) is not None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TTL:
    """
    Time To Live value object for cache expiration.

    Absence of a TTL means the entry lives until explicitly invalidated.
    """

    seconds: int

    def __post_init__(self) -> None:
        """Validate TTL value."""
        if isinstance(self.seconds, bool) or not isinstance(self.seconds, int):
            raise ValueError("TTL must be an integer number of seconds")
        if self.seconds <= 0:
            raise ValueError("TTL must be positive")
        if self.seconds > MAX_TTL_SECONDS:
            raise ValueError("TTL too large (max 1 year)")

    @classmethod
    def from_seconds(cls, seconds: int) -> "TTL":
        """Create TTL from seconds."""
        return cls(seconds)

    @classmethod
    def minutes(cls, minutes: int) -> "TTL":
        """Create TTL from minutes."""
        return cls(minutes * 60)

    @classmethod
    def hours(cls, hours: int) -> "TTL":
        """Create TTL from hours."""
        return cls(hours * 3600)

    @classmethod
    def days(cls, days: int) -> "TTL":
        """Create TTL from days."""
        return cls(days * 86400)

    @classmethod
    def until(cls, deadline: datetime, now: Optional[datetime] = None) -> "TTL":
        """
        Create TTL lasting until an absolute deadline.

        Naive datetimes are taken as UTC. Deadlines already reached still
        yield a one second TTL.
        """
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        return cls(max(1, int((deadline - now).total_seconds())))

    @classmethod
    def coerce(
        cls, ttl: Union[None, int, datetime, "TTL"]
    ) -> Optional["TTL"]:
        """
        Normalize the accepted TTL forms.

        None and 0 both mean "no expiration".
        """
        if ttl is None or isinstance(ttl, TTL):
            return ttl
        if isinstance(ttl, datetime):
            return cls.until(ttl)
        if ttl == 0:
            return None
        return cls(ttl)

    # Common TTL presets
    @classmethod
    def recipe_list(cls) -> "TTL":
        """Profile recipe lists (2 minutes)."""
        return cls.from_seconds(120)

    @classmethod
    def meal_list(cls) -> "TTL":
        """Meal search counts (3 minutes)."""
        return cls.minutes(3)

    @classmethod
    def dashboard(cls) -> "TTL":
        """Dashboard counters and upcoming plan (10 minutes)."""
        return cls.minutes(10)

    def __str__(self) -> str:
        return f"{self.seconds}s"
