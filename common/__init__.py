"""공통 유틸 패키지"""
