"""Practice repository - DynamoDB operations for practices"""

from typing import Optional

from ...storage import DynamoTable


def practice_key(practice_id: str) -> dict:
    return {"pk": f"PRACTICE#{practice_id}", "sk": "meta"}


class PracticeRepository:
    """Repository for practice database operations"""

    def __init__(self, table: DynamoTable):
        self.table = table

    def get_practice(self, practice_id: str) -> Optional[dict]:
        return self.table.get(practice_key(practice_id))

    def create_practice(self, practice: dict) -> dict:
        """Write a new practice; raises ConditionFailed if the ID is taken"""
        item = {**practice_key(practice["practiceId"]), **practice}
        self.table.put(item, condition="attribute_not_exists(pk)")
        return item
