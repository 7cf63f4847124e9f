"""
리소스 라우트 관련 예외 클래스 정의
"""


class CrudError(Exception):
    """crud 기본 예외"""
    pass


class ConfigurationError(CrudError):
    """리소스 설정 오류 (라우트 등록 시점에 발생)"""
    pass


class InvalidRouteError(ConfigurationError):
    """잘못된 Route 선언"""
    def __init__(self, route, reason: str):
        self.route = route
        self.reason = reason
        self.message = f"Invalid Route object: {reason}"
        super().__init__(self.message)


class ResourceError(CrudError):
    """클라이언트에 상태 코드와 메시지로 전달되는 에러"""
    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(self.message)


class ResponseAlreadySentError(CrudError):
    """이미 응답이 전송된 요청에 다시 응답하려 함"""
    def __init__(self):
        self.message = "Cannot send a response that has already been sent"
        super().__init__(self.message)
