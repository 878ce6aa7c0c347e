"""Category scopes used to select records for a usage pass."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CategoryScope:
    """Filter over record categories.

    A category is in scope when it equals one of ``categories`` or starts
    with one of ``prefixes``, and does not start with one of
    ``exclude_prefixes``. Categories equal to or below one of
    ``non_enumerable_prefixes`` (a prefix without a trailing dot covers
    itself and its dotted children) belong to content that cannot be listed
    exhaustively; the usage checker always treats them as in use.
    """

    categories: tuple = ()
    prefixes: tuple = ()
    exclude_prefixes: tuple = ()
    non_enumerable_prefixes: tuple = field(default=())

    @classmethod
    def everything(cls, exclude_prefixes=(), non_enumerable_prefixes=()):
        return cls(
            prefixes=('',),
            exclude_prefixes=tuple(exclude_prefixes),
            non_enumerable_prefixes=tuple(non_enumerable_prefixes),
        )

    def is_empty(self) -> bool:
        return not self.categories and not self.prefixes

    def matches(self, category: str | None) -> bool:
        category = category or ''
        if any(category.startswith(prefix) for prefix in self.exclude_prefixes):
            return False
        if category in self.categories:
            return True
        return any(category.startswith(prefix) for prefix in self.prefixes)

    def is_enumerable(self, category: str | None) -> bool:
        category = category or ''
        for prefix in self.non_enumerable_prefixes:
            if not prefix:
                continue
            segment = prefix if prefix.endswith('.') else f'{prefix}.'
            if category == segment[:-1] or category.startswith(segment):
                return False
        return True

    def describe(self) -> str:
        parts = list(self.categories) + [f'{p}*' for p in self.prefixes]
        description = ', '.join(parts) or '<empty>'
        if self.exclude_prefixes:
            description += ' except ' + ', '.join(f'{p}*' for p in self.exclude_prefixes)
        return description
