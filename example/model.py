"""예제 리소스 모델 정의"""

from pydantic import BaseModel, ConfigDict


class Item(BaseModel):
    """아이템 스키마"""
    model_config = ConfigDict(extra='ignore')

    name: str | None = None
    color: str | None = None
