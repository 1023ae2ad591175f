"""Face detection through the Cloud Vision API."""

import logging

from fastapi.concurrency import run_in_threadpool
from google.cloud import vision

from ..exceptions import AnnotationError

logger = logging.getLogger(__name__)


class FaceAnnotator:
    """Scores how confidently an image contains a face.

    ``detect_face`` returns the confidence of the first detected face, or
    ``None`` when the detector finds no face. Transport and service
    failures raise :class:`AnnotationError` instead.
    """

    def __init__(self, client: vision.ImageAnnotatorClient):
        self.client = client

    def _detect(self, blob_uri: str) -> float | None:
        image = vision.Image(source=vision.ImageSource(gcs_image_uri=blob_uri))
        response = self.client.face_detection(image=image, max_results=1)
        if response.error.message:
            raise RuntimeError(response.error.message)
        if not response.face_annotations:
            return None
        return response.face_annotations[0].detection_confidence

    async def detect_face(self, blob_uri: str) -> float | None:
        try:
            score = await run_in_threadpool(self._detect, blob_uri)
        except Exception as exc:
            logger.exception("Face detection failed", extra={"uri": blob_uri})
            raise AnnotationError() from exc
        if score is None:
            logger.info("No faces found in %s", blob_uri)
        return score
