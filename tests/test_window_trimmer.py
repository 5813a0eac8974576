"""Unit tests for WindowTrimmer."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from datetime import datetime, timezone
from models.conversation import Turn
from services.conversation_assembler import ConversationAssembler
from services.token_estimator import INFINITE_COST
from services.window_trimmer import WindowTrimmer


class CharEstimator:
    """Estimates one token per character of content and records each call."""
    
    def __init__(self):
        self.calls = 0
    
    def estimate(self, conversation):
        self.calls += 1
        return sum(len(m.content) for m in conversation)


def build_conversation(num_turns, message="hello", system_prompt="sys"):
    """System (3) + num_turns * 20 + len(message)."""
    turns = [
        Turn(
            identity="+15551234",
            user_message=f"u{i:02d}" + "x" * 7,
            assistant_response=f"a{i:02d}" + "y" * 7,
            timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc)
        )
        for i in range(num_turns)
    ]
    return ConversationAssembler(system_prompt).assemble("+15551234", message, turns)


class TestWindowTrimmer:
    """Test suite for WindowTrimmer."""
    
    @pytest.fixture
    def estimator(self):
        return CharEstimator()
    
    def test_under_budget_unchanged(self, estimator):
        conversation = build_conversation(3)  # 68
        
        trimmed = WindowTrimmer(estimator, token_budget=100).trim(conversation)
        
        assert trimmed == conversation
    
    def test_exactly_at_budget_unchanged(self, estimator):
        conversation = build_conversation(3)
        
        trimmed = WindowTrimmer(estimator, token_budget=68).trim(conversation)
        
        assert trimmed == conversation
    
    def test_input_not_mutated(self, estimator):
        conversation = build_conversation(3)
        original = list(conversation)
        
        WindowTrimmer(estimator, token_budget=30).trim(conversation)
        
        assert conversation == original
    
    def test_removes_oldest_pair_first(self, estimator):
        conversation = build_conversation(3)  # 68
        
        trimmed = WindowTrimmer(estimator, token_budget=50).trim(conversation)
        
        assert len(trimmed) == 6
        assert trimmed[0] == conversation[0]
        assert trimmed[1:] == conversation[3:]
        assert trimmed[1].content.startswith("u01")
    
    def test_removes_pairs_until_fit(self, estimator):
        conversation = build_conversation(3)  # 68 -> 48 -> 28 -> 8
        
        trimmed = WindowTrimmer(estimator, token_budget=28).trim(conversation)
        
        assert [m.content[:3] for m in trimmed] == ["sys", "u02", "a02", "hel"]
    
    def test_all_pairs_removed_when_only_minimum_fits(self, estimator):
        conversation = build_conversation(3)
        
        trimmed = WindowTrimmer(estimator, token_budget=8).trim(conversation)
        
        assert trimmed == [conversation[0], conversation[-1]]
    
    def test_unsatisfiable_returns_empty(self, estimator):
        conversation = build_conversation(3, message="m" * 100)
        
        assert WindowTrimmer(estimator, token_budget=50).trim(conversation) == []
    
    def test_unsatisfiable_without_history(self, estimator):
        conversation = build_conversation(0, message="m" * 100)
        
        assert WindowTrimmer(estimator, token_budget=50).trim(conversation) == []
    
    def test_idempotent(self, estimator):
        trimmer = WindowTrimmer(estimator, token_budget=40)
        conversation = build_conversation(10)
        
        once = trimmer.trim(conversation)
        
        assert trimmer.trim(once) == once
    
    def test_never_removes_system_prompt_or_new_message(self, estimator):
        conversation = build_conversation(6)
        
        for budget in range(8, 140):
            trimmed = WindowTrimmer(estimator, token_budget=budget).trim(conversation)
            assert trimmed[0] == conversation[0]
            assert trimmed[-1] == conversation[-1]
            assert len(trimmed) % 2 == 0
    
    def test_fifty_turns_trimmed_one_pair_at_a_time(self, estimator):
        """50 stored turns over budget: pairs are evicted one at a time."""
        conversation = build_conversation(50)  # 3 + 1000 + 5
        
        trimmed = WindowTrimmer(estimator, token_budget=208).trim(conversation)
        
        assert len(trimmed) == 2 + 2 * 10
        assert trimmed[1].content.startswith("u40")
        assert estimator.estimate(trimmed) <= 208
        # One estimate per eviction plus the initial check (and the one above)
        assert estimator.calls == 40 + 1 + 1
    
    def test_infinite_cost_is_unsatisfiable(self):
        class Broken:
            def estimate(self, conversation):
                return INFINITE_COST
        
        assert WindowTrimmer(Broken(), token_budget=4000).trim(build_conversation(5)) == []
    
    def test_invalid_budget(self, estimator):
        with pytest.raises(ValueError, match="token_budget must be positive"):
            WindowTrimmer(estimator, token_budget=0)
