"""Payload generation and domain entity models."""

from apiharness.data.generator import DataGenerator
from apiharness.data.models import Comment, Post, Todo, User

__all__ = ["Comment", "DataGenerator", "Post", "Todo", "User"]
