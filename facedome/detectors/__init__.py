"""Face detector adapters."""

from .face_retina import RetinaFaceDetector, faces_to_detections, load_face_detector
