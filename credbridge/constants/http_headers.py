"""HTTP 头常量."""


class HttpHeaders:
    """常用 HTTP 请求/响应头."""

    CONTENT_TYPE = "Content-Type"
    AUTHORIZATION = "Authorization"
    USER_AGENT = "User-Agent"
    X_REQUEST_ID = "X-Request-ID"
    X_TOKEN_USERNAME = "X-Token-Username"
    X_FORWARDED_PROTO = "X-Forwarded-Proto"
    JENKINS_CRUMB = "Jenkins-Crumb"
