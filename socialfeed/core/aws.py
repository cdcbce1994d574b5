from __future__ import annotations

import boto3

from .settings import Settings


def build_dynamodb(settings: Settings):
    session = boto3.session.Session(region_name=settings.aws_region or "us-east-1")
    if settings.dynamodb_endpoint_url:
        return session.resource("dynamodb", endpoint_url=settings.dynamodb_endpoint_url)
    return session.resource("dynamodb")
