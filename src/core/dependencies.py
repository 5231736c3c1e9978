from fastapi import Depends, Request
from sqlmodel import Session

from core.config import Settings
from model.database import get_session
from processor.codec import ImageCodec, PillowImageCodec
from service.image_service import ImageService
from service.image_store import ImageStore, SqlImageStore


def get_settings(request: Request) -> Settings:
    """create_app()에서 한 번 로드해 app.state에 올려둔 설정."""
    return request.app.state.settings


def get_image_store(session: Session = Depends(get_session)) -> ImageStore:
    return SqlImageStore(session)


def get_image_codec(settings: Settings = Depends(get_settings)) -> ImageCodec:
    return PillowImageCodec.from_settings(settings)


def get_image_service(
    store: ImageStore = Depends(get_image_store),
    codec: ImageCodec = Depends(get_image_codec),
    settings: Settings = Depends(get_settings),
) -> ImageService:
    """요청마다 협력 객체를 명시적으로 넘겨 ImageService를 조립한다.

    테스트에서는 app.dependency_overrides로 store/codec을 교체할 수 있다.
    """
    return ImageService(store=store, codec=codec, settings=settings)
