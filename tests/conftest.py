"""Shared fixtures: a small but complete System-of-Record corpus."""

from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

SOR_FILES = (
    "problems.yaml",
    "clusters.yaml",
    "mechanisms.yaml",
    "engagement_models.yaml",
    "meta_challenges.yaml",
    "foundations.yaml",
    "technologies.yaml",
    "claims.yaml",
    "sources.yaml",
    "implications.yaml",
    "compatibility.yaml",
)

CORPUS: Dict[str, str] = {
    "problems.yaml": """\
Time Blindness:
  id: FP03
  cluster: "A — Time-Perception Cascade"
  mechanisms:
    - Time Perception Distortion
  claims:
    - C001
Task Initiation Failure:
  id: FP01
  cluster: "B"
  mechanisms:
    - "Reward Deficiency (primary)"
Deadline Collapse:
  id: FP04
  cluster: "A and C (convergence point)"
  claims: [C002]
Emotional Dysregulation:
  id: FP05
  cluster: "Cross-cluster amplifier"
Working Memory Gaps:
  id: FP02
  cluster: "C"
""",
    "clusters.yaml": """\
Time-Perception Cascade:
  id: CL_A
  members:
    - problem: Time Blindness
    - problem: "Deadline Collapse (FP04)"
  primary_mechanism: Time Perception Distortion
  claims: [C001]
Activation Cascade:
  id: CL_B
  members:
    - problem: Task Initiation Failure
Memory Cascade:
  id: CL_C
  members:
    - problem: Working Memory Gaps
Emotional Amplifier:
  id: CL_AMP
  problem: "Emotional Dysregulation (FP05)"
  affects: [A, B, C]
  claims: [C002]
Deadline Convergence:
  id: CL_CONV_FP04
  problem: FP04
  receives_from: [A, C]
Standalone Note:
  id: CL_STANDALONE_X
  note: annotates nothing on the canvas
""",
    "mechanisms.yaml": """\
Time Perception Distortion:
  id: MECH01
  affects_problems:
    - "Time Blindness (primary)"
  favours_models: [Ambient Monitor]
  disfavours_models: [Weekly Coaching]
  underlies_challenges: [Novelty Decay]
Reward Deficiency:
  id: MECH02
  affects_problems: [Task Initiation Failure]
""",
    "engagement_models.yaml": """\
Ambient Monitor:
  id: EM01
  claims: [C001]
  primary_problems: [Time Blindness]
  secondary_problems: [FP01]
  meta_challenge_vulnerability:
    MC1_novelty_decay: "High: fades after a few weeks"
    MC9_unknown: "no such challenge"
Weekly Coaching:
  id: EM02
  primary_problems: [Task Initiation Failure]
""",
    "meta_challenges.yaml": """\
Novelty Decay:
  id: MC1
  clusters_affected: [A, B]
  favours_models: [Weekly Coaching]
  disfavours_models: [Ambient Monitor]
  claims: [C003]
  compound_effects:
    amplifies: [Trust Erosion]
Trust Erosion:
  id: MC2
""",
    "foundations.yaml": """\
Passive Sensing:
  id: F01
  required_by:
    required: [Ambient Monitor]
    optional: [Weekly Coaching]
  technology_ref: TECH_01
""",
    "technologies.yaml": """\
TECH_01:
  name: Wearable Sensors
  serves_foundations: [Passive Sensing]
  needed_by_models:
    required: [Ambient Monitor]
  relevant_claims: [C003]
""",
    "claims.yaml": """\
C001:
  statement: "Adults with time blindness underestimate elapsed intervals by a wide margin in lab settings."
  sources: [barkley2015]
  relationships:
    supports: [Time Blindness]
C002:
  statement: "Deadlines compress effort."
  sources: [barkley2015]
  relationships:
    depends_on: [C001]
C003:
  statement: "Novelty fades."
  relationships:
    challenged_by: [C002]
""",
    "sources.yaml": """\
barkley2015:
  name: "Barkley (2015) Attention-Deficit Hyperactivity Disorder"
  published: 2015-01-01
orphan2020:
  name: Unused Source
""",
    "implications.yaml": """\
IMP01:
  name: Design for ambient cues
  evidence: [C001, C003]
""",
    "compatibility.yaml": """\
"A — Time-Perception Cascade":
  Ambient Monitor: S
  Weekly Coaching: X
Task Initiation Failure:
  Ambient Monitor: P
meta_challenge_vulnerability:
  Ambient Monitor:
    Novelty Decay: H
    summary: "Mostly resilient once habits form"
""",
}

CORPUS_EDGE_COUNT = 54


def write_corpus(directory: Path, files: Optional[Dict[str, str]] = None) -> Path:
    """Write every required file; names missing from `files` are left empty."""
    directory.mkdir(parents=True, exist_ok=True)
    files = files or {}
    for filename in SOR_FILES:
        (directory / filename).write_text(files.get(filename, ""), encoding="utf-8")
    return directory


@pytest.fixture
def make_corpus(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    def _make(files: Dict[str, str], name: str = "sor") -> Path:
        return write_corpus(tmp_path / name, files)

    return _make


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    return write_corpus(tmp_path / "System_of_Record", CORPUS)
