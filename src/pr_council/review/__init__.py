"""Review module - diff 조립, 토큰 예산, Multi-Role 리뷰 및 결과 직렬화."""

from pr_council.review.budget import BudgetCheck, TokenBudgetEnforcer
from pr_council.review.line_mapper import assign_line_numbers
from pr_council.review.patch_strategy import build_patch_prompt, select_patch_strategy
from pr_council.review.runner import ReviewRunner, review_files, review_files_sync
from pr_council.review.serializer import parse_reviews, serialize_batch, serialize_reviews

__all__ = [
    "BudgetCheck",
    "ReviewRunner",
    "TokenBudgetEnforcer",
    "assign_line_numbers",
    "build_patch_prompt",
    "parse_reviews",
    "review_files",
    "review_files_sync",
    "select_patch_strategy",
    "serialize_batch",
    "serialize_reviews",
]
