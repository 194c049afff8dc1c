class CatalogError(Exception):
    code = "CATALOG_ERROR"

    def __init__(self, detail: str, status_code: int = 400):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class NotFoundError(CatalogError):
    """详情 / 编辑 / 删除页面请求的记录不存在"""

    code = "NOT_FOUND"

    def __init__(self, detail: str):
        super().__init__(detail, status_code=404)


class RepositoryFailure(CatalogError):
    """存储层失败，直接上抛到全局异常处理，返回 500"""

    code = "INTERNAL_ERROR"

    def __init__(self, detail: str):
        super().__init__(detail, status_code=500)
