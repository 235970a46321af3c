from .image_session import ImageSession, ImageSummary
