"""Factory-boy factories for request payload entities.

Each factory builds a plain dict with Faker-generated values. Field names
follow the wire format (camelCase foreign keys via Meta.rename).

Usage:
    user = UserFactory()
    post = PostFactory(user_id=user["id"])
"""

import factory
from faker import Faker

fake = Faker()


def positive_id() -> int:
    """Random positive integer id, wide enough to avoid cross-test collisions."""
    return fake.random_int(min=1, max=1_000_000)


class UserFactory(factory.Factory):
    """Factory for user payloads.

    Usage:
        user = UserFactory()
        named = UserFactory(name="Leanne Graham")
    """

    class Meta:
        model = dict

    id = factory.LazyFunction(positive_id)
    name = factory.LazyFunction(lambda: fake.name())
    username = factory.LazyFunction(lambda: fake.user_name())
    email = factory.LazyFunction(lambda: fake.email())
    phone = factory.LazyFunction(lambda: fake.phone_number())
    website = factory.LazyFunction(lambda: fake.domain_name())


class PostFactory(factory.Factory):
    """Factory for post payloads."""

    class Meta:
        model = dict
        rename = {"user_id": "userId"}

    id = factory.LazyFunction(positive_id)
    user_id = factory.LazyFunction(positive_id)
    title = factory.LazyFunction(lambda: fake.sentence(nb_words=6).rstrip("."))
    body = factory.LazyFunction(lambda: fake.paragraph(nb_sentences=3))


class CommentFactory(factory.Factory):
    """Factory for comment payloads."""

    class Meta:
        model = dict
        rename = {"post_id": "postId"}

    id = factory.LazyFunction(positive_id)
    post_id = factory.LazyFunction(positive_id)
    name = factory.LazyFunction(lambda: fake.sentence(nb_words=4).rstrip("."))
    email = factory.LazyFunction(lambda: fake.email())
    body = factory.LazyFunction(lambda: fake.paragraph(nb_sentences=2))


class TodoFactory(factory.Factory):
    """Factory for todo payloads."""

    class Meta:
        model = dict
        rename = {"user_id": "userId"}

    id = factory.LazyFunction(positive_id)
    user_id = factory.LazyFunction(positive_id)
    title = factory.LazyFunction(lambda: fake.sentence(nb_words=5).rstrip("."))
    completed = factory.LazyFunction(lambda: fake.pybool())
