"""
Keyword based category suggestion for post and memo bodies.

The suggestion is advisory: callers show it next to the operator's chosen
category and never overwrite that choice with it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from slugify import slugify

from categories import DEFAULT_CATEGORY

# Editors only ask for a suggestion once the body is longer than this.
SUGGEST_MIN_LENGTH = 50
SLUG_MAX_LENGTH = 100


def _build_table(raw: Mapping[str, Tuple[str, ...]]) -> Mapping[str, Tuple[str, ...]]:
    # Insertion order is the tie-break order.
    return MappingProxyType(
        {category: tuple(kw.lower() for kw in keywords) for category, keywords in raw.items()}
    )


CATEGORY_KEYWORDS = _build_table(
    {
        "dev": (
            "코드", "개발", "프로그래밍", "API", "버그", "Next.js", "React",
            "JavaScript", "TypeScript", "함수", "변수", "서버", "배포",
            "Git", "GitHub", "프론트엔드", "백엔드", "데이터베이스", "SQL",
            "CSS", "HTML", "컴포넌트", "라이브러리", "프레임워크", "Node.js",
            "npm", "패키지", "에러", "디버깅", "코딩", "알고리즘",
        ),
        "cooking": (
            "요리", "레시피", "맛있", "음식", "재료", "끓이", "볶", "굽",
            "먹", "식당", "맛집", "밥", "국", "반찬", "디저트", "베이킹",
            "케이크", "빵", "파스타", "고기", "야채", "소스", "양념",
        ),
        "study": (
            "공부", "학습", "책", "강의", "시험", "영어", "수학", "자격증",
            "독서", "교육", "수업", "학교", "대학", "논문", "연구", "암기",
            "복습", "예습", "문제풀이", "합격", "불합격", "성적",
        ),
        "exercise": (
            "운동", "헬스", "러닝", "건강", "다이어트", "근육", "달리기",
            "요가", "필라테스", "수영", "등산", "자전거", "조깅", "스트레칭",
            "웨이트", "체중", "감량", "벌크업", "컨디션", "트레이닝",
        ),
    }
)


def score_categories(
    text: str, table: Mapping[str, Tuple[str, ...]] = CATEGORY_KEYWORDS
) -> list:
    """Return ``(category, score)`` pairs, best first.

    A keyword counts once no matter how often it appears. ``sorted`` is
    stable, so equal scores keep the table's declaration order.
    """
    lowered = (text or "").lower()
    scores = [
        (category, sum(1 for kw in keywords if kw in lowered))
        for category, keywords in table.items()
    ]
    return sorted(scores, key=lambda pair: pair[1], reverse=True)


def suggest_category(
    text: str,
    min_length: Optional[int] = None,
    table: Mapping[str, Tuple[str, ...]] = CATEGORY_KEYWORDS,
) -> str:
    """Best-guess category id for ``text``, ``daily`` when nothing matches.

    ``min_length`` is the optional caller guard: text of that length or
    shorter is not scored at all.
    """
    if min_length is not None and len(text or "") <= min_length:
        return DEFAULT_CATEGORY
    ranked = score_categories(text, table)
    if not ranked or ranked[0][1] == 0:
        return DEFAULT_CATEGORY
    return ranked[0][0]


def suggest_slug(title: str) -> str:
    return slugify(title or "", max_length=SLUG_MAX_LENGTH, word_boundary=True)
