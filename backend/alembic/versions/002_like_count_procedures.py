"""Like count procedures

Revision ID: 002
Revises: 001
Create Date: 2025-02-03 00:10:00.000000+00:00

What:  Stored procedures the API calls through PostgREST (/rest/v1/rpc/...).

    increment_likes(post_id)        likes_count + 1
    decrement_likes(post_id)        likes_count - 1, never below zero
    reconcile_likes_count(post_id)  likes_count = number of like rows

The parameter is named `post_id` because PostgREST matches JSON keys to
argument names: POST /rest/v1/rpc/increment_likes {"post_id": 7}.
"""

from typing import Sequence, Union
from alembic import op

# revision identifiers
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.increment_likes(post_id bigint)
        RETURNS void
        LANGUAGE sql
        AS $$
            UPDATE public.posts
               SET likes_count = likes_count + 1
             WHERE id = increment_likes.post_id;
        $$;
        """
    )
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.decrement_likes(post_id bigint)
        RETURNS void
        LANGUAGE sql
        AS $$
            UPDATE public.posts
               SET likes_count = GREATEST(likes_count - 1, 0)
             WHERE id = decrement_likes.post_id;
        $$;
        """
    )
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.reconcile_likes_count(post_id bigint)
        RETURNS integer
        LANGUAGE sql
        AS $$
            UPDATE public.posts AS p
               SET likes_count = (
                   SELECT count(*) FROM public.likes AS l
                    WHERE l.post_id = reconcile_likes_count.post_id
               )
             WHERE p.id = reconcile_likes_count.post_id
         RETURNING p.likes_count;
        $$;
        """
    )


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS public.reconcile_likes_count(bigint);")
    op.execute("DROP FUNCTION IF EXISTS public.decrement_likes(bigint);")
    op.execute("DROP FUNCTION IF EXISTS public.increment_likes(bigint);")
