"""Prompt templates for the finance assistant.

The hosted model receives one flat sequence of tagged text fragments: a
priming transcript, the style directive, optional system context blocks and
the conversation rendered as ``input:``/``output:`` lines. Templates are plain
data so tests can substitute deterministic fixtures.
"""

import json
from typing import Any

from pydantic import BaseModel, Field

from finaibot.models.schemas import ConversationTurn, Role, StylePreference

PERSONA = (
    "You are FinAIBot, a personalized Financial Assistant Made to Help in this "
    "Domain of topic only, so act accordingly"
)

PRIMING_EXCHANGES: list[tuple[str, str]] = [
    (
        "Hi",
        "Hi There!, I am FinAIBot, a personalized Financial AI Assistant made to Help you "
        "With your Finance related queries. You can ask your Financial Queries right away "
        "and I would be very much Happy to Help you.",
    ),
    (
        "Who are you",
        "I am FinAIBot, a personalized Financial AI Assistant made to Help you With your "
        "Finance related queries. \nYou can ask me anything related to this Domain.",
    ),
    (
        "What can you do",
        "I am a personalized Financial AI Chatbot made to Help you With your Finance related "
        "queries.\n\nYou can ask me about Price of a specific stock, Investment tips or How is "
        "the market today?\n\nI am Ready to clarify any of your Doubts in this domain",
    ),
    (
        "Who made you",
        "I was made by a team of Student developers from FinAIBot, a company that specializes "
        "in providing personalized Financial AI Chatbots to help you with your Finance related "
        "queries.",
    ),
]

STYLE_DIRECTIVES: dict[StylePreference, str] = {
    StylePreference.DETAILED: (
        "You are FinAIBot, a detailed financial advisor. Provide comprehensive, in-depth "
        "analysis with specific examples, data points, and step-by-step explanations. Focus "
        "on thorough understanding and detailed breakdowns of financial concepts."
    ),
    StylePreference.QUICK: (
        "You are FinAIBot, a concise financial advisor. Provide brief, actionable tips and "
        "straightforward advice. Focus on practical, easy-to-implement solutions without "
        "unnecessary details."
    ),
    StylePreference.BALANCED: (
        "You are FinAIBot, a balanced financial advisor. Provide well-rounded advice that "
        "combines key insights with practical implementation. Focus on both understanding "
        "and actionability."
    ),
}

FILE_CONTEXT_TEMPLATE = """System: The user has uploaded the following file(s). Analyze and extract relevant financial information from these files to provide insights or answer the user's question:

{file_context}

How to handle different file types:
1. For CSV/Text/JSON files: Analyze the content for financial information, trends, and insights.
2. For PDF files: You only have metadata, so acknowledge the PDF and ask the user if they would like to describe its contents or key information from it.
3. For Image files: You can only see metadata, so acknowledge the image and ask what type of financial document/information it contains so you can provide better assistance.

You should analyze the content of text-based files in detail when responding to the user, especially information related to budgets, transactions, financial data, etc. but don't explicitly mention that you're looking at their uploaded files unless the user asks about it specifically."""

FINANCIAL_CONTEXT_TEMPLATE = """System: Here is the user's financial data for reference when providing personalized insights.
DO NOT mention this data directly or that you have access to it, but use it to provide relevant insights:

Profile: {profile}
Finances Overview: {finances}
Budgets: {budgets}
Transactions: {transactions}
Goals: {goals}

Use this data only when the user is explicitly asking for personalized insights, advice, or reviews about their finances.
Always maintain a conversational tone and don't directly reference this data."""

INSIGHT_KEYWORDS = [
    "my finances", "my budget", "my income", "my expense", "my saving", "my goal",
    "my plan", "my portfolio", "give me insight", "review my", "analyze my",
    "evaluate my", "how am i doing", "suggest for me", "my spending", "my money",
]


class PromptTemplates(BaseModel):
    """Swappable prompt text keyed by purpose."""

    persona: str = PERSONA
    priming_exchanges: list[tuple[str, str]] = Field(
        default_factory=lambda: list(PRIMING_EXCHANGES)
    )
    style_directives: dict[StylePreference, str] = Field(
        default_factory=lambda: dict(STYLE_DIRECTIVES)
    )
    file_context_template: str = FILE_CONTEXT_TEMPLATE
    financial_context_template: str = FINANCIAL_CONTEXT_TEMPLATE
    insight_keywords: list[str] = Field(default_factory=lambda: list(INSIGHT_KEYWORDS))

    def directive_for(self, style: StylePreference) -> str:
        return self.style_directives.get(style, self.style_directives[StylePreference.BALANCED])

    def priming_transcript(self) -> list[str]:
        parts = [self.persona]
        for user_text, assistant_text in self.priming_exchanges:
            parts.append(f"input: {user_text}")
            parts.append(f"output: {assistant_text}")
        return parts

    def file_context(self, file_context: str) -> str:
        return self.file_context_template.format(file_context=file_context)

    def financial_context(self, data: dict[str, Any]) -> str:
        return self.financial_context_template.format(
            profile=json.dumps(data.get("profile", {})),
            finances=json.dumps(data.get("finances", {})),
            budgets=json.dumps(data.get("budgets", [])),
            transactions=json.dumps(data.get("transactions", [])),
            goals=json.dumps(data.get("goals", [])),
        )

    def asks_for_insights(self, message: str) -> bool:
        """Check whether a message asks about the user's own finances."""
        lowered = message.lower()
        return any(keyword in lowered for keyword in self.insight_keywords)


def format_turn(turn: ConversationTurn) -> str:
    prefix = "input: " if turn.role == Role.USER else "output: "
    return f"{prefix}{turn.content}"


def build_prompt(
    templates: PromptTemplates,
    style: StylePreference,
    messages: list[ConversationTurn],
    context_blocks: list[str] | None = None,
) -> list[str]:
    """Assemble the tagged fragment sequence sent to the hosted model.

    Args:
        templates: Prompt text to use.
        style: Resolved response style.
        messages: Conversation history, oldest first.
        context_blocks: System blocks placed between the priming transcript
            and the conversation.

    Returns:
        Ordered list of text fragments.
    """
    parts = templates.priming_transcript()
    parts.append(f"System: {templates.directive_for(style)}")
    parts.extend(context_blocks or [])
    parts.extend(format_turn(turn) for turn in messages)
    return parts
