from __future__ import annotations

ANALYSIS_INSTRUCTIONS = (
    "You are an API analysis assistant. Your task is to analyze HTTP transactions and provide "
    "detailed, accurate pseudocode that reflects the server-side implementation. Focus on "
    "functionality. Be specific, technical, and thorough in your analysis. Your analysis should "
    "include:\n"
    "1. A detailed explanation of what this API endpoint does\n"
    "2. The likely data flow between client, server, and any databases\n"
    "3. Detailed pseudocode that shows how the server likely processes this request\n"
    "4. The programming language/framework most likely used\n"
    "\n"
    "For the pseudocode:\n"
    "- Include input validation steps\n"
    "- Show database queries if applicable\n"
    "- Include authentication/authorization checks\n"
    "- Detail any business logic or algorithms\n"
    "- Show how the response is constructed\n"
)

TASK_STATEMENT = (
    "Analyze the following HTTP transaction and infer the backend server logic that generated "
    "this response.\n"
    "Provide detailed pseudocode that reflects the server-side implementation.\n"
)

REQUEST_SECTION = "===REQUEST==="
RESPONSE_SECTION = "===RESPONSE==="


def build_prompt(req: str, res: str) -> str:
    """Render the request/response pair into the analysis prompt."""
    return (
        f"\n{ANALYSIS_INSTRUCTIONS}\n"
        f"{TASK_STATEMENT}\n"
        f"{REQUEST_SECTION}\n{req}\n\n"
        f"{RESPONSE_SECTION}\n{res}\n"
    )
