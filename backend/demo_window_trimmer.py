"""Demo script for conversation windowing."""
import sys
sys.path.insert(0, '.')

from datetime import datetime, timezone

from config import SYSTEM_PROMPT, TOKEN_BUDGET
from models.conversation import Turn
from services.token_estimator import TokenEstimator
from services.conversation_assembler import ConversationAssembler
from services.window_trimmer import WindowTrimmer


def main():
    """Demo how a long history is trimmed to the token budget."""
    print("=== Conversation Window Demo ===\n")
    
    estimator = TokenEstimator()
    assembler = ConversationAssembler(SYSTEM_PROMPT)
    trimmer = WindowTrimmer(estimator, token_budget=TOKEN_BUDGET)
    
    phone_number = "+15551234"
    turns = [
        Turn(
            identity=phone_number,
            user_message=f"Question {i}: " + "tell me more about the weather " * 10,
            assistant_response=f"Answer {i}: " + "it is sunny with a light breeze " * 10,
            timestamp=datetime.now(timezone.utc)
        )
        for i in range(1, 51)
    ]
    
    print(f"1. Assembling conversation from {len(turns)} stored turns...")
    conversation = assembler.assemble(phone_number, "What should I wear today?", turns)
    print(f"   - Messages: {len(conversation)}")
    print(f"   - Estimate: {estimator.estimate(conversation)} tokens\n")
    
    print(f"2. Trimming to {TOKEN_BUDGET} tokens...")
    trimmed = trimmer.trim(conversation)
    print(f"   - Messages kept: {len(trimmed)}")
    print(f"   - Turns kept: {(len(trimmed) - 2) // 2}")
    print(f"   - Estimate: {estimator.estimate(trimmed)} tokens")
    print(f"   - Oldest kept: {trimmed[1].content[:40]}...")
    print(f"   - Last message: {trimmed[-1].content}\n")
    
    print("3. Trimming a message that can never fit...")
    oversized = assembler.assemble(phone_number, "word " * (TOKEN_BUDGET * 2), [])
    result = trimmer.trim(oversized)
    print(f"   - Result: {result!r} (empty means unsatisfiable)\n")
    
    print("=== Demo Complete ===")


if __name__ == "__main__":
    main()
