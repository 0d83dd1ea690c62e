"""
Category service: CRUD for categories.

Categories have no owner: any authenticated caller may create, rename or
delete them.  Slug uniqueness is pre-checked to produce a clear message,
but the unique constraint on ``categories.slug`` is the guard that holds
under concurrent writes; an ``IntegrityError`` from it is reported the
same way.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import ConflictError, NotFoundError
from app.models import Category
from app.schemas import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

SLUG_TAKEN = "Category slug already exists"


def category_to_dict(category: Category) -> dict:
    return {"id": category.id, "name": category.name, "slug": category.slug}


async def _slug_owner(db: AsyncSession, slug: str) -> Category | None:
    result = await db.execute(select(Category).where(Category.slug == slug))
    return result.scalar_one_or_none()


async def _flush_or_conflict(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError(SLUG_TAKEN)


async def create_category(db: AsyncSession, data: CategoryCreate) -> dict:
    if await _slug_owner(db, data.slug) is not None:
        raise ConflictError(SLUG_TAKEN)

    category = Category(name=data.name, slug=data.slug)
    db.add(category)
    await _flush_or_conflict(db)
    logger.info("Created category %s (%s)", category.id, category.slug)
    return category_to_dict(category)


async def get_categories(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(Category).order_by(Category.name.asc()))
    return [category_to_dict(c) for c in result.scalars().all()]


async def get_category(db: AsyncSession, category_id: str) -> dict:
    """Return the category together with a summary of its posts."""
    q = (
        select(Category)
        .where(Category.id == category_id)
        .options(selectinload(Category.posts))
    )
    result = await db.execute(q)
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category")

    data = category_to_dict(category)
    data["posts"] = [
        {
            "id": p.id,
            "title": p.title,
            "authorId": p.author_id,
            "createdAt": p.created_at.isoformat() if p.created_at else None,
        }
        for p in category.posts
    ]
    return data


async def update_category(db: AsyncSession, category_id: str, data: CategoryUpdate) -> dict:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category")

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    new_slug = update_data.get("slug")
    if new_slug is not None and new_slug != category.slug:
        existing = await _slug_owner(db, new_slug)
        if existing is not None and existing.id != category.id:
            raise ConflictError(SLUG_TAKEN)

    for field, value in update_data.items():
        setattr(category, field, value)

    await _flush_or_conflict(db)
    return category_to_dict(category)


async def delete_category(db: AsyncSession, category_id: str) -> None:
    """Delete a category; its post links go with it, the posts stay."""
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category")

    await db.delete(category)
    await db.flush()
    logger.info("Deleted category %s", category_id)
