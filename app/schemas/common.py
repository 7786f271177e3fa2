"""공통 Pydantic 스키마 정의.

Common Pydantic schema definitions shared by several API domains.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, PlainSerializer

# 금액 타입 — 내부는 Decimal, JSON 응답은 소수점 2자리 숫자
# Money: Decimal internally, serialised as a 2-dp JSON number
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


class MessageResponse(BaseModel):
    """단순 메시지 응답 스키마.

    Simple message response schema.

    Attributes:
        message: 응답 메시지 (Response message)
    """

    message: str  # 응답 메시지 (Response message text)
