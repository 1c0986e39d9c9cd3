from marketplace.schemas.common import CamelModel


class FavoriteStatus(CamelModel):
    listing_id: int
    is_favorite: bool


class FavoriteCount(CamelModel):
    listing_id: int
    count: int
