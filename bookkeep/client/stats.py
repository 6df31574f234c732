"""Aggregates for the dashboard, library and analytics views.

Pure functions over the book dicts held by ``BookContext.books`` (camelCase
keys as returned by the API). Dates may be ISO strings or datetimes.
"""
import math
from collections import Counter
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional

from bookkeep.books.schemas import BookStatus, Genre

Book = Dict[str, Any]

SORT_OPTIONS = ("dateAdded", "rating", "title", "pages")


def _parse_dt(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _timestamp(value: Any) -> float:
    dt = _parse_dt(value)
    if dt is None:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def _round_half_up(value: float) -> int:
    # halves go up, not to even
    return int(math.floor(value + 0.5))


def _round_tenth(value: float) -> float:
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _finished(books: Iterable[Book]) -> List[Book]:
    return [b for b in books if b.get("status") == BookStatus.FINISHED.value]


def quick_stats(books: List[Book]) -> Dict[str, Any]:
    """Pages read (finished books), average rating, books in progress, total."""
    rated = [b["rating"] for b in books if b.get("rating")]
    return {
        "pagesRead": sum(b.get("totalPages") or 0 for b in _finished(books)),
        "averageRating": _round_tenth(sum(rated) / len(rated)) if rated else None,
        "currentlyReading": sum(1 for b in books if b.get("status") == BookStatus.READING.value),
        "totalBooks": len(books),
    }


def yearly_challenge(books: List[Book], goal: int, year: Optional[int] = None) -> Dict[str, Any]:
    """Progress toward reading ``goal`` books in ``year`` (defaults to this year)."""
    year = year or date.today().year
    done = 0
    for b in _finished(books):
        finished_at = _parse_dt(b.get("dateFinished"))
        if finished_at and finished_at.year == year:
            done += 1
    progress = min(done / goal * 100, 100.0) if goal > 0 else 0.0
    return {
        "year": year,
        "goal": goal,
        "finished": done,
        "progress": progress,
        "remaining": max(goal - done, 0),
        "completed": done >= goal,
    }


def monthly_pace(books: List[Book], today: Optional[date] = None, months: int = 12) -> List[Dict[str, Any]]:
    """Finished books per month for the last ``months`` months, oldest first."""
    today = today or date.today()
    counts: Counter = Counter()
    for b in _finished(books):
        finished_at = _parse_dt(b.get("dateFinished"))
        if finished_at:
            counts[(finished_at.year, finished_at.month)] += 1

    pace = []
    for offset in range(months - 1, -1, -1):
        index = today.year * 12 + (today.month - 1) - offset
        year, month = divmod(index, 12)
        month += 1
        pace.append({
            "name": date(year, month, 1).strftime("%b"),
            "month": f"{year}-{month:02d}",
            "books": counts[(year, month)],
        })
    return pace


def genre_distribution(books: List[Book]) -> List[Dict[str, Any]]:
    """Finished books per genre, in the order genres are first seen."""
    counts = Counter(b.get("genre") for b in _finished(books))
    return [{"name": genre, "value": count} for genre, count in counts.items()]


def rating_distribution(books: List[Book]) -> List[Dict[str, Any]]:
    counts = [0, 0, 0, 0, 0]
    for b in books:
        rating = b.get("rating")
        if rating and 1 <= rating <= 5:
            counts[rating - 1] += 1
    return [
        {"rating": f"{stars} Star" if stars == 1 else f"{stars} Stars", "count": counts[stars - 1]}
        for stars in range(1, 6)
    ]


def recent_activity(books: List[Book], limit: int = 3) -> List[Book]:
    """Most recently finished books."""
    dated = [b for b in _finished(books) if b.get("dateFinished")]
    dated.sort(key=lambda b: _timestamp(b["dateFinished"]), reverse=True)
    return dated[:limit]


def progress_percent(book: Book) -> int:
    total = book.get("totalPages") or 0
    if total <= 0:
        return 0
    return _round_half_up((book.get("currentPage") or 0) / total * 100)


def current_read(books: List[Book]) -> Optional[Dict[str, Any]]:
    """First book being read, with its progress; None when nothing is in progress."""
    book = next((b for b in books if b.get("status") == BookStatus.READING.value), None)
    if book is None:
        return None
    return {"book": book, "progress": progress_percent(book)}


def status_counts(books: List[Book]) -> Dict[str, int]:
    counts = {"all": len(books)}
    for status in BookStatus:
        counts[status.value] = sum(1 for b in books if b.get("status") == status.value)
    return counts


def filter_and_sort(
    books: List[Book],
    status: str = "all",
    search: str = "",
    sort_by: str = "dateAdded",
) -> List[Book]:
    """Library view: filter by status and title/author text, then sort."""
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {sort_by}")

    result = list(books)
    if status != "all":
        result = [b for b in result if b.get("status") == status]
    if search:
        needle = search.lower()
        result = [
            b for b in result
            if needle in (b.get("title") or "").lower() or needle in (b.get("author") or "").lower()
        ]

    if sort_by == "dateAdded":
        result.sort(key=lambda b: _timestamp(b.get("dateAdded")), reverse=True)
    elif sort_by == "rating":
        result.sort(key=lambda b: b.get("rating") or 0, reverse=True)
    elif sort_by == "title":
        result.sort(key=lambda b: (b.get("title") or "").lower())
    else:
        result.sort(key=lambda b: b.get("totalPages") or 0, reverse=True)
    return result


def genres() -> List[str]:
    """Genres a book may have, for pickers."""
    return [g.value for g in Genre]
