"""
Unit Economics Prompts

The output-schema text is the contract with the model. Any change to the
required fields in schemas.py has to be mirrored in output_schema_prompt().
"""

from dataclasses import dataclass

from unit_economics.analysis.schemas import AnalysisRequest


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


def system_prompt() -> str:
    return (
        "You are a startup unit economics expert with 15 years of experience in venture "
        "investing and consulting. You specialize in analyzing the business models of "
        "technology startups and SaaS companies. "
        "You base your calculations on proven industry metrics and use conservative estimates. "
        "You always state the data sources and assumptions behind your calculations."
    )


def output_schema_prompt() -> str:
    return """Provide a structured analysis in JSON format with the following structure:

{
    "metrics": {
        "cac": {
            "value": [number in dollars],
            "explanation": "detailed explanation of how CAC is calculated for this model, with assumptions"
        },
        "ltv": {
            "value": [number in dollars],
            "explanation": "explanation of the LTV calculation given the business specifics and retention rate"
        },
        "churn_rate": {
            "value": [number in percent without the % sign],
            "explanation": "justification of the churn level for this industry with benchmarks"
        },
        "payback_period": {
            "value": [number of months],
            "explanation": "customer payback period and its justification"
        },
        "unit_margin": {
            "value": [number in dollars],
            "explanation": "margin per unit of product or service with a cost breakdown"
        },
        "ltv_cac_ratio": {
            "value": [number with 1 decimal place],
            "explanation": "LTV to CAC ratio and its interpretation (good >3, excellent >5)"
        }
    },
    "recommendations": [
        "specific recommendation 1 for improving the metrics, with numbers",
        "specific recommendation 2 for optimizing the business model",
        "specific recommendation 3 for growth and scaling"
    ],
    "assumptions": [
        "key assumption 1 used in the calculations, with justification",
        "key assumption 2 about the market or customers",
        "key assumption 3 about the monetization model"
    ],
    "risk_factors": [
        "main risk 1 for the unit economics, with a likelihood estimate",
        "main risk 2 related to the business model",
        "main risk 3 affecting the metrics"
    ],
    "market_insights": {
        "industry_benchmarks": "comparison with typical industry figures, with concrete numbers",
        "competitive_analysis": "short analysis of the competitive landscape and positioning",
        "growth_potential": "assessment of growth and scaling potential, with time frames"
    }
}

CRITICAL REQUIREMENTS:
1. All metrics must be realistic and based on industry data
2. State the concrete sources of your assumptions (for example: "typical for B2B SaaS")
3. CAC must account for all acquisition channels
4. LTV must account for the real churn rate and expansion revenue
5. Respond with ONLY a single valid JSON object, no text before or after it
6. All numeric values must be bare numbers, without currency symbols in value"""


def user_prompt(request: AnalysisRequest) -> str:
    additional = request.additional_info or "Not specified"
    return (
        "Perform a detailed unit economics analysis for the following startup:\n\n"
        f"STARTUP IDEA: {request.startup_idea}\n\n"
        f"BUSINESS DESCRIPTION: {request.description}\n\n"
        f"ADDITIONAL INFORMATION: {additional}\n\n"
        f"{output_schema_prompt()}"
    )


def build_prompt(request: AnalysisRequest) -> Prompt:
    return Prompt(system=system_prompt(), user=user_prompt(request))
