from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TodoItem(BaseModel):
    id: int
    type: str
    title: str
    due_date: Optional[datetime] = None
    module_id: int
    module_name: str


class PageMeta(BaseModel):
    current_page: int
    page_count: int
    total_count: int
    is_first_page: bool
    is_last_page: bool
    previous_page: Optional[int] = None
    next_page: Optional[int] = None


class TodosPage(BaseModel):
    todos: list[TodoItem]
    meta: PageMeta
