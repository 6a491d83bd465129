"""Provider repository - DynamoDB operations for providers"""

from typing import Optional

from boto3.dynamodb.conditions import Attr

from ...storage import DynamoTable

PROVIDER_PREFIX = "PROVIDER#"


def provider_key(provider_id: str) -> dict:
    return {"pk": f"{PROVIDER_PREFIX}{provider_id}", "sk": "meta"}


class ProviderRepository:
    """Repository for provider database operations"""

    def __init__(self, table: DynamoTable):
        self.table = table

    def get_provider(self, provider_id: str) -> Optional[dict]:
        return self.table.get(provider_key(provider_id))

    def create_provider(self, provider: dict) -> dict:
        """Write a new provider; raises ConditionFailed if the ID is taken"""
        item = {**provider_key(provider["providerId"]), **provider}
        self.table.put(item, condition="attribute_not_exists(pk)")
        return item

    def list_providers(self, practice_id: Optional[str] = None) -> list[dict]:
        """Get every provider, or those of one practice"""
        filter_expression = Attr("pk").begins_with(PROVIDER_PREFIX)
        if practice_id:
            filter_expression = filter_expression & Attr("practiceId").eq(practice_id)
        return self.table.scan(FilterExpression=filter_expression)
