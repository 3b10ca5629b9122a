"""
Admin backend package.

This package provides a FastAPI application that keeps the admin dataset
(people, questions, shop items) in memory and persists it to S3-compatible
object storage through a serialized mutation queue.
"""
