from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    저장 레코드와 API 응답은 camelCase 키를 쓴다.
    파이썬 코드에서는 snake_case 필드명으로도 생성 가능.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
