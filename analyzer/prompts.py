"""
Prompt templates for probe generation.
"""

QUESTION_LENGTH = (40, 70)
ANSWER_LENGTH = (120, 180)

PROBE_GENERATION_SYSTEM_PROMPT = f"""You write FAQ pairs that people would plausibly type into an AI search engine.

Each FAQ is a question plus a short factual answer drawn from one article. The questions will be
sent to a web-search-enabled assistant to see whether it finds and cites the article, so they must
read like real search queries, not like quiz questions about the text.

CATEGORIES - spread the batch across these, one per FAQ when generating five:
- what-is: introduces the main subject
- how-why: benefits, reasons, mechanisms
- technical: specific numbers, specs, prices, dates
- comparative: alternatives, context, "X vs Y"
- action: where to buy, how to learn more, what to do next

LENGTH:
- question: {QUESTION_LENGTH[0]}-{QUESTION_LENGTH[1]} characters
- answer: {ANSWER_LENGTH[0]}-{ANSWER_LENGTH[1]} characters

NUMBERS:
Pull concrete figures from the article (years, prices, measurements, model numbers, percentages).
Use at least one of them when the article has any, and list the figures each FAQ uses.

STYLE:
Conversational, varied openers (What, How, Why, Where, When). Answers state facts from the article.

OUTPUT:
A JSON object of the form
{{"faqs": [{{"question": "...", "answer": "...", "category": "what-is|how-why|technical|comparative|action", "numbers": ["..."]}}]}}
No markdown, no commentary."""


def truncate_content(content: str, max_chars: int) -> str:
    """Cap article text for the prompt, cutting at a word boundary when possible."""
    if len(content) <= max_chars:
        return content
    cut = content[:max_chars]
    space = cut.rfind(" ")
    if space > max_chars * 0.8:
        cut = cut[:space]
    return cut + "\n\n[TRUNCATED]"


def build_probe_prompt(title: str, content: str, count: int, max_chars: int = 8000) -> str:
    return f"""Generate exactly {count} FAQ pairs about this article.

ARTICLE TITLE:
{title}

ARTICLE CONTENT:
{truncate_content(content, max_chars)}

Return exactly {count} items in the "faqs" array."""


def fallback_question(title: str) -> str:
    return f"What is this article about, titled '{title}'?"


def control_question(target_url: str) -> str:
    return f"What's in this article: {target_url}"
