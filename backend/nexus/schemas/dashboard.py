from .common import ApiModel


class RoleDistribution(ApiModel):
    role_id: str
    name: str
    count: int
    percentage: int


class DashboardStats(ApiModel):
    total_users: int
    active_users: int
    inactive_users: int
    total_roles: int
    total_posts: int
    published_posts: int
    roles: list[RoleDistribution]
