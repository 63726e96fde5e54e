"""Static repository dataset served when GitHub is unreachable and nothing is cached."""

from __future__ import annotations

from repo_showcase.models import RepositorySummary

DEFAULT_FALLBACK_REPOSITORIES: tuple[RepositorySummary, ...] = (
    RepositorySummary(
        id=1,
        name="PHARMUP",
        description=(
            "A comprehensive pharmaceutical management system built with "
            "modern web technologies"
        ),
        url="https://github.com/lewisgathaiya/pharmup",
        language="JavaScript",
        star_count=0,
        updated_at="2025-01-01T00:00:00+00:00",
        topics=("pharmacy", "management", "healthcare"),
    ),
    RepositorySummary(
        id=2,
        name="SECULEARN",
        description=(
            "An innovative security learning platform for cybersecurity education"
        ),
        url="https://github.com/lewisgathaiya/seculearn",
        language="Python",
        star_count=0,
        updated_at="2025-01-01T00:00:00+00:00",
        topics=("security", "education", "cybersecurity"),
    ),
    RepositorySummary(
        id=3,
        name="lewis-portfolio-website",
        description=(
            "Modern portfolio website with animated backgrounds and "
            "multilingual support"
        ),
        url="https://github.com/lewisgathaiya/lewis-portfolio-website",
        language="JavaScript",
        star_count=0,
        updated_at="2025-01-01T00:00:00+00:00",
        topics=("portfolio", "react", "nextjs"),
        homepage="https://mwangilewis.com",
    ),
)
