"""Optional OCR pass backed by a shared, lazily started Tesseract engine."""

from __future__ import annotations

import atexit
import enum
import logging
import time
from threading import Lock
from typing import Any, Callable, Dict, List, Protocol, Sequence

import pytesseract
from pytesseract import Output as TesseractOutput
from PIL import Image

from ..errors import OcrError, OcrInitializationError
from ..extract.images import open_image
from ..io.models import BoundingBox, OcrLine, OcrProgress, OcrResult, OcrWord

logger = logging.getLogger(__name__)

_DEFAULT_LANG = "eng"
_WORD_LEVEL = 5

ProgressCallback = Callable[[OcrProgress], None]


class TextRecognizer(Protocol):
    """Engine wrapped by :class:`OcrService`.

    ``recognize`` returns Tesseract ``image_to_data`` style columns:
    ``{"text": [...], "conf": [...], "left": [...], "top": [...], ...}``
    with confidences on a 0-100 scale.
    """

    def start(self) -> None:
        ...

    def recognize(self, image: Image.Image) -> Dict[str, List[Any]]:
        ...

    def stop(self) -> None:
        ...


class TesseractRecognizer:
    """Tesseract-based recognizer."""

    def __init__(self, lang: str = _DEFAULT_LANG) -> None:
        self.lang = lang

    def start(self) -> None:
        version = pytesseract.get_tesseract_version()
        languages = pytesseract.get_languages(config="")
        if self.lang not in languages:
            raise RuntimeError(f"Tesseract language model '{self.lang}' is not installed")
        logger.debug("Tesseract %s ready (lang=%s)", version, self.lang)

    def recognize(self, image: Image.Image) -> Dict[str, List[Any]]:
        return pytesseract.image_to_data(
            image.convert("RGB"), lang=self.lang, output_type=TesseractOutput.DICT
        )

    def stop(self) -> None:
        # each image_to_data call runs its own tesseract process
        return None


class OcrState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class OcrService:
    """Lazily initialised text recognition shared across calls.

    Initialisation happens at most once at a time: concurrent callers wait for
    the in-flight start instead of spinning up a second engine. Recognition
    calls are serialised on the same engine.
    """

    def __init__(
        self,
        recognizer_factory: Callable[[], TextRecognizer] | None = None,
        lang: str = _DEFAULT_LANG,
    ) -> None:
        self._factory = recognizer_factory or (lambda: TesseractRecognizer(lang=lang))
        self._recognizer: TextRecognizer | None = None
        self._state = OcrState.UNINITIALIZED
        self._init_lock = Lock()
        self._recognize_lock = Lock()

    @property
    def state(self) -> OcrState:
        return self._state

    def initialize(self) -> None:
        """Start the engine unless it is already running."""
        if self._state is OcrState.READY:
            return
        with self._init_lock:
            if self._state is OcrState.READY:
                return
            self._state = OcrState.INITIALIZING
            try:
                recognizer = self._factory()
                recognizer.start()
            except Exception as exc:
                self._recognizer = None
                self._state = OcrState.FAILED
                logger.warning("OCR engine failed to start: %s", exc)
                raise OcrInitializationError(f"Failed to start OCR engine: {exc}") from exc
            self._recognizer = recognizer
            self._state = OcrState.READY
            logger.debug("OCR engine initialised")

    def extract_text(
        self,
        source: str | Image.Image,
        on_progress: ProgressCallback | None = None,
    ) -> OcrResult:
        """Recognise the text in *source* (an image or its URL)."""
        started = time.perf_counter()
        _notify(on_progress, "initializing engine", 0.0)
        self.initialize()
        _notify(on_progress, "loading image", 0.05)
        image = open_image(source)

        with self._recognize_lock:
            recognizer = self._recognizer
            if recognizer is None:
                raise OcrError("OCR engine was terminated")
            _notify(on_progress, "recognizing text", 0.1)
            try:
                data = recognizer.recognize(image)
            except Exception as exc:
                raise OcrError(f"Text recognition failed: {exc}") from exc

        _notify(on_progress, "recognizing text", 1.0)
        elapsed = int((time.perf_counter() - started) * 1000)
        return parse_recognition(data, processing_time=elapsed)

    def extract_text_batch(
        self,
        sources: Sequence[str | Image.Image],
        on_progress: ProgressCallback | None = None,
    ) -> list[OcrResult]:
        """Recognise each source in order.

        A failing image yields an empty placeholder result instead of aborting
        the batch. Engine start-up failures still propagate.
        """
        self.initialize()
        total = len(sources)
        results: list[OcrResult] = []
        for index, source in enumerate(sources):
            callback = _scaled_progress(on_progress, index, total) if on_progress else None
            try:
                results.append(self.extract_text(source, callback))
            except OcrInitializationError:
                raise
            except Exception:  # noqa: BLE001
                logger.warning("OCR failed for image %d; using empty result", index, exc_info=True)
                results.append(empty_ocr_result())
        return results

    def terminate(self) -> None:
        """Release the engine. Safe to call when nothing is running."""
        with self._init_lock:
            with self._recognize_lock:
                recognizer, self._recognizer = self._recognizer, None
                self._state = OcrState.UNINITIALIZED
        if recognizer is None:
            return
        try:
            recognizer.stop()
        except Exception:  # pragma: no cover
            logger.warning("Failed to stop OCR engine", exc_info=True)


_service_lock = Lock()
_service: OcrService | None = None


def get_ocr_service() -> OcrService:
    """Return the process-wide OCR service, creating it on first use."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                service = OcrService()
                atexit.register(service.terminate)
                _service = service
    return _service


def empty_ocr_result() -> OcrResult:
    return OcrResult(text="", confidence=0.0, lines=(), words=(), processing_time=0)


def normalize_confidence(value: float) -> float:
    """Map an engine confidence on the 0-100 scale onto [0, 1]."""
    return max(0.0, min(1.0, float(value) / 100.0))


def parse_recognition(data: Dict[str, List[Any]], processing_time: int = 0) -> OcrResult:
    """Build an :class:`OcrResult` from ``image_to_data`` style columns."""
    texts = data.get("text") or []
    count = len(texts)
    levels = _column(data, "level", count, _WORD_LEVEL)
    confs = _column(data, "conf", count, -1)
    lefts = _column(data, "left", count, 0)
    tops = _column(data, "top", count, 0)
    widths = _column(data, "width", count, 0)
    heights = _column(data, "height", count, 0)
    blocks = _column(data, "block_num", count, 0)
    pars = _column(data, "par_num", count, 0)
    line_nums = _column(data, "line_num", count, 0)

    words: list[OcrWord] = []
    grouped: dict[tuple[int, int, int], list[OcrWord]] = {}
    for i in range(count):
        text = str(texts[i] or "").strip()
        conf = _to_float(confs[i])
        if not text or conf < 0 or int(levels[i]) != _WORD_LEVEL:
            continue
        left, top = int(lefts[i]), int(tops[i])
        bbox = BoundingBox(left, top, left + int(widths[i]), top + int(heights[i]))
        word = OcrWord(text=text, confidence=normalize_confidence(conf), bbox=bbox)
        words.append(word)
        key = (int(blocks[i]), int(pars[i]), int(line_nums[i]))
        grouped.setdefault(key, []).append(word)

    lines = [_merge_line(members) for members in grouped.values()]
    confidence = sum(w.confidence for w in words) / len(words) if words else 0.0
    return OcrResult(
        text="\n".join(line.text for line in lines),
        confidence=confidence,
        lines=tuple(lines),
        words=tuple(words),
        processing_time=processing_time,
    )


def _merge_line(words: list[OcrWord]) -> OcrLine:
    bbox = BoundingBox(
        x0=min(w.bbox.x0 for w in words),
        y0=min(w.bbox.y0 for w in words),
        x1=max(w.bbox.x1 for w in words),
        y1=max(w.bbox.y1 for w in words),
    )
    return OcrLine(
        text=" ".join(w.text for w in words),
        confidence=sum(w.confidence for w in words) / len(words),
        bbox=bbox,
    )


def _column(data: Dict[str, List[Any]], key: str, count: int, default: Any) -> List[Any]:
    values = data.get(key)
    if values is None or len(values) < count:
        return [default] * count
    return list(values)


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return -1.0


def _notify(callback: ProgressCallback | None, status: str, progress: float) -> None:
    if callback is not None:
        callback(OcrProgress(status=status, progress=progress))


def _scaled_progress(callback: ProgressCallback, index: int, total: int) -> ProgressCallback:
    def _report(update: OcrProgress) -> None:
        callback(
            OcrProgress(
                status=f"{update.status} ({index + 1}/{total})",
                progress=(index + update.progress) / total,
            )
        )

    return _report
