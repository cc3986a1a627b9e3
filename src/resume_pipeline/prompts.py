# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Prompt builders for the model orchestrator.
"""

from typing import List, Optional


def analysis_prompt(anonymized_resume: str, job_description: str, job_title: Optional[str] = None) -> str:
    return f"""You are an expert resume analyzer and career coach. Analyze the following resume against the job description and provide a detailed assessment.

JOB TITLE: {job_title or 'Not specified'}

JOB DESCRIPTION:
{job_description}

RESUME (anonymized):
{anonymized_resume}

Provide your analysis in the following JSON format ONLY (no markdown, no code blocks, just pure JSON):
{{
  "matchScore": <number between 0-100 representing how well the resume matches the job>,
  "missingKeywords": [<array of important keywords/skills from the job description that are missing in the resume>],
  "strengths": [<array of strong points where the candidate matches or exceeds requirements>],
  "tips": [<array of specific, actionable tips to improve the resume for this job>],
  "overallAssessment": "<2-3 sentence summary of the candidate's fit for this role>"
}}

Be specific and constructive. Focus on:
1. Technical skills match
2. Experience relevance
3. Education alignment
4. Missing certifications or skills
5. Resume formatting/presentation issues that might hurt ATS compatibility"""


def summary_prompt(
    full_name: str,
    target_job_title: Optional[str],
    latest_title: str,
    latest_company: str,
    skills: List[str],
    experience_count: int,
) -> str:
    return f"""Write a professional resume summary (2-3 sentences, first person implied but don't start with "I").
Person: {full_name or 'Professional'}
Target role: {target_job_title or 'Not specified'}
Latest experience: {latest_title} at {latest_company}
Skills: {', '.join(skills[:10]) or 'Not specified'}
Total experience entries: {experience_count}

Write ONLY the summary text. No quotes, no labels, no explanations. Make it punchy, specific, and achievement-oriented."""


def bullets_prompt(bullets: List[str], job_title: str) -> str:
    numbered = "\n".join(f"{i}. {b}" for i, b in enumerate(bullets, start=1))
    return f"""Rewrite these resume bullet points to be achievement-oriented using the STAR method. Add quantifiable metrics where possible.
Job title: {job_title}

Original bullets:
{numbered}

Return ONLY the rewritten bullets as a JSON array of strings. No markdown, no explanation.
Example output: ["Led cross-functional team of 8...", "Reduced deployment time by 40%..."]"""


def ats_prompt(resume_text: str, job_description: str) -> str:
    return f"""You are an ATS (Applicant Tracking System) expert. Analyze this resume against the job description.

RESUME:
{resume_text}

JOB DESCRIPTION:
{job_description}

Return a JSON object with exactly this structure (no markdown, no explanation):
{{
  "score": <number 0-100>,
  "missingKeywords": ["keyword1", "keyword2"],
  "tips": ["tip1", "tip2", "tip3"]
}}

Score criteria: keyword match (40%), experience relevance (30%), skills alignment (20%), formatting (10%)."""
