"""System prompts for every generation task.

Each builder embeds the transcript verbatim and pins the exact JSON array the
model must return.
"""
from typing import Iterable

DEFAULT_REQUEST = "Generate the study material from the transcript."

_JSON_RULES = """
Requirements:
  - Return only the JSON array in the exact format specified.
  - No disclaimers, explanations or commentary outside the JSON.
  - Do not use markdown formatting or code blocks.
  - Ensure the JSON is valid and can be parsed.
  - Ignore information about personnel, course structure or tools; focus on educational content.
"""


def flashcards_prompt(transcript: str, count: int = 15) -> str:
    return f"""
Convert the following transcript into {count} study flashcards.
Also generate a short session name. The final JSON format should be:
[
  "sessionName",
  [
    {{"question": "Question 1", "answer": "Answer 1"}},
    ...
  ]
]

Transcript:
{transcript}
{_JSON_RULES}
  - Index 0: a short sessionName (string).
  - Index 1: an array of flashcard objects, each with "question" and "answer" fields.
  - Use the same language as the transcript.
""".strip()


def more_flashcards_prompt(transcript: str, existing_questions: Iterable[str], count: int = 10) -> str:
    existing = "\n".join(existing_questions)
    return f"""
Convert the following transcript into {count} more study flashcards.
These flashcards MUST cover content and topics of the transcript that the
already existing flashcards do not cover. Do not repeat existing questions.
The final JSON format should be:
[
  {{"question": "Question 1", "answer": "Answer 1"}},
  ...
]

Transcript:
{transcript}

Already existing flashcards:
{existing}
{_JSON_RULES}
  - Generated flashcards MUST be in the same language as the transcript.
""".strip()


def quiz_prompt(transcript: str) -> str:
    return f"""
Convert the following transcript into a detailed and varied multiple-choice quiz.
Generate a short session name that summarizes the key subject matter, then a
series of questions covering concepts, definitions, applications and insights
from the transcript, varied in style and difficulty. Each question has at least
4 options; "answer" repeats the text of the correct option and "explanation"
says why it is correct. The final JSON format should be:
[
  "sessionName",
  [
    {{
      "question": "Question text",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "answer": "Option B",
      "explanation": "Why Option B is correct."
    }},
    ...
  ]
]

Transcript:
\"\"\"
{transcript}
\"\"\"
{_JSON_RULES}
  - Use the same language as the transcript.
""".strip()


def summary_prompt(transcript: str) -> str:
    return f"""
Summarize the following transcript in a short and concise manner, recapping only
the critical details. Also generate a session name. The user may ask you to
focus on a particular topic within the transcript. The final JSON format should be:
[
  "sessionName",
  "summary"
]

Transcript:
{transcript}
{_JSON_RULES}
  - Index 0: a short sessionName (string).
  - Index 1: the transcript summary (string).
  - Return the summary in the same language as the transcript.
""".strip()


def chat_prompt(transcript: str) -> str:
    return f"""
You have the following transcript as context:
{transcript}

The user will ask a question or talk about the transcript. Use the transcript
to inform your answer. If the question is unrelated or cannot be answered from
the transcript, politely yet firmly say so. Also generate a short yet
descriptive chat name. The final JSON format should be:
[
  "chatName",
  "answer"
]
{_JSON_RULES}
  - Index 0: a short chatName (string).
  - Index 1: the answer to the user, based on the transcript.
  - Answer in the language the user uses.
""".strip()
