"""
데이터 접근 계층 예외 클래스 정의
"""


class DataAccessError(Exception):
    """데이터 접근 기본 예외 (조회/저장 거부)"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class CastError(DataAccessError):
    """식별자 형식 변환 실패"""
    def __init__(self, value):
        self.value = value
        super().__init__(f'Cast to id failed for value "{value}"')


class RecordValidationError(DataAccessError):
    """레코드 스키마 유효성 검사 실패"""
    pass
