"""Database seeder: demo users, categories, posts and comments."""
import argparse
import asyncio
import logging
import random
import time

from app.config import settings
from app.database import Database
from app.logging_config import configure_logging
from app.models import Category, Comment, Post, User
from app.security import hash_password

logger = logging.getLogger("seed")

DEMO_PASSWORD = "password123"

USERS = [
    ("user1@example.com", "John Doe", "https://example.com/avatars/john.jpg"),
    ("user2@example.com", "Jane Smith", "https://example.com/avatars/jane.jpg"),
    ("user3@example.com", "Alice Johnson", "https://example.com/avatars/alice.jpg"),
    ("user4@example.com", "Bob Brown", "https://example.com/avatars/bob.jpg"),
    ("user5@example.com", "Emma Davis", "https://example.com/avatars/emma.jpg"),
]

CATEGORIES = [
    ("Technology", "technology"),
    ("Programming", "programming"),
    ("Travel", "travel"),
    ("Lifestyle", "lifestyle"),
    ("Science", "science"),
]

POST_BODY = (
    "# {title}\n\n"
    "This is a **sample** post about *{topic}*.\n\n"
    "- point one\n- point two\n\n"
    "```python\nprint('hello from {topic}')\n```\n"
)

COMMENTS = [
    "Great post, thanks for sharing!",
    "Very helpful explanation.",
    "I had not thought about it this way.",
    "Looking forward to the next one.",
]


async def seed(db: Database, num_posts: int) -> None:
    start = time.perf_counter()

    await db.drop_all()
    await db.create_all()

    async with db.session_factory() as session:
        # One hash for every demo account keeps seeding fast.
        password_hash = hash_password(DEMO_PASSWORD)
        users = [
            User(email=email, name=name, avatar_url=avatar, password_hash=password_hash)
            for email, name, avatar in USERS
        ]
        session.add_all(users)

        categories = [Category(name=name, slug=slug) for name, slug in CATEGORIES]
        session.add_all(categories)
        await session.flush()
        logger.info("Created %d users and %d categories", len(users), len(categories))

        posts = []
        for i in range(num_posts):
            picked = random.sample(categories, k=random.randint(1, 2))
            title = f"Sample post {i + 1}"
            post = Post(
                title=title,
                content=POST_BODY.format(title=title, topic=picked[0].name.lower()),
                author_id=random.choice(users).id,
            )
            post.categories = picked
            posts.append(post)
        session.add_all(posts)
        await session.flush()
        logger.info("Created %d posts", len(posts))

        comments = [
            Comment(
                content=random.choice(COMMENTS),
                post_id=post.id,
                author_id=random.choice(users).id,
            )
            for post in posts
            for _ in range(random.randint(0, 3))
        ]
        session.add_all(comments)
        await session.commit()
        logger.info("Created %d comments", len(comments))

    logger.info("Seeding finished in %.2fs", time.perf_counter() - start)


async def main(num_posts: int) -> None:
    db = Database(settings.DATABASE_URL)
    try:
        await seed(db, num_posts)
    finally:
        await db.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the blog database with demo data")
    parser.add_argument("--posts", type=int, default=20, help="number of posts to create")
    args = parser.parse_args()
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(main(args.posts))
