"""Exports for the vector space core."""

from .basis import BasisState, NotificationLog, NotificationSink, log_notification, resolve_basis
from .engine import evaluate
from .linalg import EigenDecomposition, Result, Status
from .operations import OPERATIONS, apply_scene_transform, run_operation
from .parser import EvaluationError, ExpressionError, ParseError
from .persistence import SceneDocument, SceneDocumentError, dump_scene, load_scene
from .scene import (
    Derivation,
    DerivationKind,
    EvaluationResult,
    Matrix,
    Point,
    SceneObject,
    Vector,
    VisualizationMode,
    object_from_dict,
)

__all__ = [
    "BasisState",
    "NotificationLog",
    "NotificationSink",
    "log_notification",
    "resolve_basis",
    "evaluate",
    "EigenDecomposition",
    "Result",
    "Status",
    "OPERATIONS",
    "apply_scene_transform",
    "run_operation",
    "EvaluationError",
    "ExpressionError",
    "ParseError",
    "SceneDocument",
    "SceneDocumentError",
    "dump_scene",
    "load_scene",
    "Derivation",
    "DerivationKind",
    "EvaluationResult",
    "Matrix",
    "Point",
    "SceneObject",
    "Vector",
    "VisualizationMode",
    "object_from_dict",
]
