"""Seed demo users, categories, posts, and comments."""

from app import create_app
from models import db
from models.category import Category
from models.comment import Comment
from models.post import Post, PostStatus
from models.user import Role, User
from utils.content import newlines_to_html
from utils.slugs import slugify


def get_or_create_user(name: str, email: str, role: Role, password: str) -> User:
    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(name=name, email=email, role=role.value)
        user.set_password(password)
        db.session.add(user)
    else:
        user.name = name
        user.role = role.value
        user.set_password(password)
    return user


def get_or_create_category(name: str) -> Category:
    category = Category.query.filter_by(name=name).first()
    if category is None:
        category = Category(name=name, slug=slugify(name))
        db.session.add(category)
    return category


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()

        admin = get_or_create_user("Admin", "admin@example.com", Role.ADMIN, "AdminPass123")
        reader = get_or_create_user("Reader", "reader@example.com", Role.USER, "ReaderPass123")
        travel = get_or_create_category("Travel Notes")
        cooking = get_or_create_category("Cooking")

        db.session.flush()

        posts_data = [
            {
                "title": "A Week in Lisbon",
                "content": "Trams, tiles and pastries.\n\nWe walked everywhere.",
                "category": travel,
                "status": PostStatus.PUBLISHED,
            },
            {
                "title": "Sourdough Basics",
                "content": "Flour, water, salt.\nAnd patience.",
                "category": cooking,
                "status": PostStatus.PUBLISHED,
            },
            {
                "title": "Upcoming Trips",
                "content": "<p>Still planning.</p>",
                "category": travel,
                "status": PostStatus.DRAFT,
            },
        ]

        posts = []
        for data in posts_data:
            slug = slugify(data["title"])
            post = Post.query.filter_by(slug=slug).first()
            if post is None:
                post = Post(slug=slug, author_id=admin.id)
                db.session.add(post)
            post.title = data["title"]
            post.content = newlines_to_html(data["content"])
            post.category_id = data["category"].id
            post.status = data["status"].value
            post.image = app.config["DEFAULT_POST_IMAGE"]
            posts.append(post)

        db.session.flush()

        first_post = posts[0]
        existing_comment = Comment.query.filter_by(
            user_id=reader.id, post_id=first_post.id
        ).first()
        if existing_comment is None:
            db.session.add(
                Comment(
                    post_id=first_post.id,
                    user_id=reader.id,
                    content="Adding Lisbon to my list!",
                )
            )
        db.session.commit()

        print("Seed data inserted: admin, reader, categories, posts, comment.")


if __name__ == "__main__":
    main()
