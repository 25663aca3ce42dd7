"""PR-Council: PR diff를 역할별 리뷰 요청으로 조립하고 결과를 종합하는 도구."""

__version__ = "0.1.0"
