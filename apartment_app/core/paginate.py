MAX_PAGE_SIZE = 100


class PaginatePage:
    def clamp(self, page: int, per_page: int) -> tuple[int, int]:
        return max(page, 1), min(max(per_page, 1), MAX_PAGE_SIZE)

    def offset(self, page: int, per_page: int) -> int:
        page, per_page = self.clamp(page, per_page)
        return (page - 1) * per_page