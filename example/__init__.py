"""crud 예제 애플리케이션 (Item 리소스)"""
