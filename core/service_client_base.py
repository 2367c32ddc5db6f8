"""
Base Service Client for Microservice Communication

所有服务客户端的基类，统一管理 HTTP 客户端与 Bearer 令牌转发
"""

import httpx
import logging
from typing import Optional, Dict, Any
from abc import ABC

logger = logging.getLogger(__name__)


class BaseServiceClient(ABC):
    """
    服务客户端基类

    自动处理：
    1. 基础 URL 解析
    2. Bearer 令牌转发
    3. HTTP 客户端管理
    4. 超时控制

    使用示例：
        class BackendClient(BaseServiceClient):
            service_name = "marketplace_backend"
            default_port = 3001

            async def get_keys(self, token: str):
                response = await self.get("/g-keys", bearer_token=token)
                return response.json()
    """

    # 子类需要定义这些
    service_name: str = None
    default_port: int = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        初始化服务客户端

        Args:
            base_url: 服务基础URL（不提供时使用 localhost 默认端口）
            timeout: 请求超时时间（秒）
            transport: 自定义传输层（测试时注入 httpx.MockTransport）
        """
        if not self.service_name:
            raise ValueError(f"{self.__class__.__name__} must define 'service_name'")

        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            self.base_url = self._default_url()

        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers=self._build_default_headers(),
            transport=transport,
        )

        logger.debug(f"Initialized {self.service_name} client: {self.base_url}")

    def _default_url(self) -> str:
        default_url = f"http://localhost:{self.default_port}" if self.default_port else "http://localhost:8000"
        logger.warning(f"No base URL for {self.service_name}, using default: {default_url}")
        return default_url

    def _build_default_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"marketplace-client/{self.service_name}",
        }

    @staticmethod
    def _auth_headers(
        bearer_token: Optional[str],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, str]:
        merged = dict(headers or {})
        if bearer_token:
            merged["Authorization"] = f"Bearer {bearer_token}"
        return merged

    async def close(self):
        """关闭HTTP客户端"""
        await self.client.aclose()
        logger.debug(f"Closed {self.service_name} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP 方法封装
    # ========================================

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Any] = None,
        json: Optional[Any] = None,
        content: Optional[bytes] = None,
        bearer_token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """通用请求"""
        url = f"{self.base_url}{path}"
        return await self.client.request(
            method.upper(),
            url,
            params=params,
            json=json,
            content=content,
            headers=self._auth_headers(bearer_token, headers),
        )

    async def get(
        self,
        path: str,
        params: Optional[Any] = None,
        bearer_token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """GET 请求"""
        return await self.request("GET", path, params=params, bearer_token=bearer_token, headers=headers)

    async def post(
        self,
        path: str,
        json: Optional[Any] = None,
        bearer_token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """POST 请求"""
        return await self.request("POST", path, json=json, bearer_token=bearer_token, headers=headers)

    async def health_check(self) -> bool:
        """
        健康检查

        Returns:
            服务是否健康
        """
        try:
            response = await self.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"{self.service_name} health check failed: {e}")
            return False


__all__ = ["BaseServiceClient"]
