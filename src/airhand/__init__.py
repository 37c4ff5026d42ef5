"""airhand - Real-time hand gesture classification from pose landmarks."""

__version__ = "0.1.0"

from airhand.landmarks import HandFrame, HandLandmark, Point2D, Point3D
from airhand.config import EngineConfig
from airhand.errors import AirhandError, ConfigError, MalformedFrameError, TimestampError
from airhand.state import GestureLabel, GestureState, GestureStateMachine
from airhand.velocity import VelocityEstimator
from airhand.stability import StabilityTracker
from airhand.classifier import GestureRule, PoseClassifier
from airhand.engine import EngineSession, GestureEngine
from airhand.geometry import index_tip, pinch_center, thumb_tip
from airhand.profiler import PipelineProfiler
from airhand.recorder import SessionPlayer, SessionRecorder
