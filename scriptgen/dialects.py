from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from scriptgen.errors import ValidationError
from scriptgen.models import Credentials, RequirementSet

BASE_URL_TOKEN = "{{BASE_URL}}"
USERNAME_TOKEN = "{{USERNAME}}"
PASSWORD_TOKEN = "{{PASSWORD}}"


def js_quote(value: str) -> str:
    """Escape a value for use inside a single-quoted JavaScript string."""
    return value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")


@dataclass(frozen=True)
class DialectProfile:
    """Code contract for one automation dialect.

    Prompt composition, offline rendering and checking only ever go through
    this object, so supporting another dialect means adding a profile.
    """

    name: str
    display_name: str
    entry_point: str
    structure_template: str
    selector_rules: Tuple[str, ...]
    required_primitives: Tuple[str, ...]
    forbidden_patterns: Tuple[str, ...]
    requirement_guidance: Dict[str, str]
    rubric_checks: Tuple[str, ...]
    default_temperature: float
    offline_prelude: str
    offline_auth: str
    offline_body: str
    offline_epilogue: str
    offline_snippets: Dict[str, str] = field(default_factory=dict)

    def render_structure(self, base_url: str) -> str:
        return self.structure_template.replace(BASE_URL_TOKEN, base_url)

    def render_offline(
        self,
        base_url: str,
        requirements: RequirementSet,
        credentials: Optional[Credentials] = None,
        summary: str = "",
    ) -> str:
        parts: List[str] = [self.offline_prelude]
        if summary:
            parts.append(f"    // Test implementation based on: {summary}\n")
        if credentials is not None:
            parts.append(
                self.offline_auth.replace(USERNAME_TOKEN, js_quote(credentials.username)).replace(
                    PASSWORD_TOKEN, js_quote(credentials.password)
                )
            )
        parts.append(self.offline_body)
        for tag in requirements.ordered():
            snippet = self.offline_snippets.get(tag)
            if snippet:
                parts.append(snippet)
        parts.append(self.offline_epilogue)
        return "".join(parts).replace(BASE_URL_TOKEN, base_url)

    def find_forbidden(self, code: str) -> List[str]:
        return [pattern for pattern in self.forbidden_patterns if pattern in code]


PLAYWRIGHT = DialectProfile(
    name="playwright",
    display_name="Playwright",
    entry_point="async function runTest(page, expect)",
    structure_template="""async function runTest(page, expect) {
  try {
    // Navigation
    await page.goto('{{BASE_URL}}');
    await page.waitForLoadState('networkidle');

    // Authentication (only when credentials are provided)

    // Your generated test code here

    console.log('All tests completed successfully!');
  } catch (error) {
    console.error('Test failed:', error.message);
    throw error;
  }
}""",
    selector_rules=(
        "Headlines: 'h1, .headline, [data-testid=\"headline\"], [role=\"heading\"]'",
        "Subheadings: 'h2, h3, .subheading, [data-testid=\"subheading\"]'",
        "CTA Buttons: 'button, [role=\"button\"], .cta, .btn-primary, [data-testid=\"cta\"]'",
        "Forms: 'form, .form, [data-testid=\"form\"]'",
        "Navigation: 'nav, .nav, [role=\"navigation\"]'",
        "Join fallback selectors with commas and call .first() when several may match",
    ),
    required_primitives=(
        "page.goto(url) followed by page.waitForLoadState('networkidle')",
        "page.locator(selector) for every element lookup",
        "page.fill(selector, value) for typing into inputs",
        "await expect(locator).toBeVisible() for visibility checks",
        "await expect(locator).toContainText('text') for text validation",
        "page.setViewportSize({ width, height }) for viewport changes",
    ),
    forbidden_patterns=(
        "page.setViewport(",
        "page.waitForNavigation(",
        "page.$eval(",
        "page.$$eval(",
        "require('puppeteer')",
    ),
    requirement_guidance={
        "responsive": """RESPONSIVE TESTING:
const viewports = [
  { name: 'Mobile', width: 375, height: 667 },
  { name: 'Tablet', width: 768, height: 1024 },
  { name: 'Desktop', width: 1280, height: 800 }
];
for (const viewport of viewports) {
  await page.setViewportSize({ width: viewport.width, height: viewport.height });
  await expect(page.locator('h1, .headline').first()).toBeVisible();
  console.log(`${viewport.name} view - layout responsive`);
}""",
        "accessibility": """ACCESSIBILITY TESTING:
const title = await page.title();
console.log(`Page title: ${title}`);
const imagesWithoutAlt = await page.locator('img:not([alt])').count();
console.log(`Images without alt text: ${imagesWithoutAlt}`);""",
        "interactive": """INTERACTIVE TESTING:
const cta = page.locator('button, [role="button"], .cta, .btn-primary, [data-testid="cta"]').first();
await expect(cta).toBeVisible();
await cta.click();
await page.waitForLoadState('networkidle');
console.log('CTA interaction successful');""",
        "forms": """FORM TESTING:
await page.fill('[name="email"], #email', 'test@example.com');
await page.click('[type="submit"], button[type="submit"]');
await page.waitForLoadState('networkidle');
console.log('Form submission successful');""",
    },
    rubric_checks=(
        "Serverless function structure: async function runTest(page, expect) with try-catch",
        "Correct Playwright API usage (page.goto, page.locator, page.waitForLoadState, etc.)",
        "Smart selectors with fallbacks (multiple selectors separated by commas)",
        "Proper use of expect assertions for validation",
        "Navigation followed by waitForLoadState('networkidle')",
    ),
    default_temperature=0.1,
    offline_prelude="""async function runTest(page, expect) {
  try {
    console.log('Starting test...');
    await page.goto('{{BASE_URL}}');
    await page.waitForLoadState('networkidle');
""",
    offline_auth="""
    await page.fill('[name="username"], [name="email"], #username, #email', '{{USERNAME}}');
    await page.fill('[name="password"], #password', '{{PASSWORD}}');
    await page.click('[type="submit"], button[type="submit"], .login-btn, .submit-btn');
    await page.waitForLoadState('networkidle');
    console.log('Authentication completed');
""",
    offline_body="""
    const headline = page.locator('h1, .headline, [data-testid="headline"], [role="heading"]').first();
    await expect(headline).toBeVisible();
    console.log('Headline visible');
""",
    offline_snippets={
        "responsive": """
    const viewports = [
      { name: 'Mobile', width: 375, height: 667 },
      { name: 'Tablet', width: 768, height: 1024 },
      { name: 'Desktop', width: 1280, height: 800 }
    ];
    for (const viewport of viewports) {
      await page.setViewportSize({ width: viewport.width, height: viewport.height });
      await expect(page.locator('h1, .headline').first()).toBeVisible();
      console.log(`${viewport.name} view - layout responsive`);
    }
""",
        "accessibility": """
    const title = await page.title();
    console.log(`Page title: ${title}`);
    const imagesWithoutAlt = await page.locator('img:not([alt])').count();
    console.log(`Images without alt text: ${imagesWithoutAlt}`);
""",
        "interactive": """
    const cta = page.locator('button, [role="button"], .cta, .btn-primary, [data-testid="cta"]').first();
    await expect(cta).toBeVisible();
    await cta.click();
    await page.waitForLoadState('networkidle');
    console.log('CTA interaction successful');
""",
        "forms": """
    await page.fill('[name="email"], #email', 'test@example.com');
    await page.click('[type="submit"], button[type="submit"]');
    await page.waitForLoadState('networkidle');
    console.log('Form submission successful');
""",
    },
    offline_epilogue="""
    console.log('All tests completed successfully!');
  } catch (error) {
    console.error('Test failed:', error.message);
    throw error;
  }
}
""",
)


PUPPETEER = DialectProfile(
    name="puppeteer",
    display_name="Puppeteer",
    entry_point="async function runTest(page)",
    structure_template="""async function runTest(page) {
  try {
    console.log('Starting test...');
    // Navigation
    await page.goto('{{BASE_URL}}', { waitUntil: 'networkidle0' });

    // Test implementation
    // Use clean selectors and proper waits

    console.log('Test completed successfully');
  } catch (error) {
    console.error('Test failed:', error.message);
    throw error;
  }
}""",
    selector_rules=(
        "Use CSS selectors with comma-joined fallbacks: 'button[type=\"submit\"], [data-testid=\"login-btn\"], .login-button'",
        "Wait for every element with page.waitForSelector(selector, { visible: true }) before using it",
        "Prefer data-testid, name and role attributes over positional selectors",
    ),
    required_primitives=(
        "page.goto(url, { waitUntil: 'networkidle0' }) for navigation",
        "page.waitForSelector(selector) before interacting with an element",
        "page.type(selector, value) for typing into inputs",
        "page.click(selector) for clicks",
        "Promise.all([page.waitForNavigation(), page.click(selector)]) when a click navigates",
        "page.setViewport({ width, height }) for viewport changes",
    ),
    forbidden_patterns=(
        "page.locator(",
        "page.waitForLoadState(",
        "page.setViewportSize(",
        "page.fill(",
        "expect(",
        ":has-text(",
    ),
    requirement_guidance={
        "responsive": """RESPONSIVE TESTING:
for (const viewport of [{ width: 375, height: 667 }, { width: 1280, height: 800 }]) {
  await page.setViewport(viewport);
  await page.waitForSelector('h1, .headline', { visible: true });
  console.log(`Viewport ${viewport.width}x${viewport.height} rendered`);
}""",
        "accessibility": """ACCESSIBILITY TESTING:
const missingAlt = await page.$$eval('img:not([alt])', (nodes) => nodes.length);
console.log(`Images without alt text: ${missingAlt}`);
const unlabelled = await page.$$eval('button:not([aria-label])', (nodes) => nodes.filter((n) => !n.textContent.trim()).length);
console.log(`Buttons without accessible name: ${unlabelled}`);""",
        "interactive": """INTERACTIVE TESTING:
const button = await page.waitForSelector('button, [role="button"], .cta', { visible: true });
await button.click();
console.log('Interactive element clicked');""",
        "forms": """FORM TESTING:
await page.waitForSelector('form, [data-testid="form"]');
await page.type('[name="email"], #email', 'test@example.com');
await Promise.all([
  page.waitForNavigation({ waitUntil: 'networkidle0' }),
  page.click('[type="submit"], button[type="submit"]'),
]);
console.log('Form submission successful');""",
    },
    rubric_checks=(
        "Function structure: async function runTest(page) with try-catch",
        "Navigation uses page.goto(url, { waitUntil: 'networkidle0' })",
        "Elements are awaited with page.waitForSelector before use",
        "Typing uses page.type and clicks use page.click",
        "No Playwright-only primitives (locator, waitForLoadState, fill, expect)",
    ),
    default_temperature=0.3,
    offline_prelude="""async function runTest(page) {
  try {
    console.log('Starting test...');
    await page.goto('{{BASE_URL}}', { waitUntil: 'networkidle0' });
""",
    offline_auth="""
    await page.waitForSelector('[name="username"], [name="email"], #username, #email', { visible: true });
    await page.type('[name="username"], [name="email"], #username, #email', '{{USERNAME}}');
    await page.type('[name="password"], #password', '{{PASSWORD}}');
    await Promise.all([
      page.waitForNavigation({ waitUntil: 'networkidle0' }),
      page.click('[type="submit"], button[type="submit"], .login-btn'),
    ]);
    console.log('Authentication completed');
""",
    offline_body="""
    await page.waitForSelector('h1, .headline, [data-testid="headline"], [role="heading"]', { visible: true });
    console.log('Headline visible');
""",
    offline_snippets={
        "responsive": """
    await page.setViewport({ width: 375, height: 667 });
    await page.waitForSelector('h1, .headline', { visible: true });
    console.log('Mobile viewport rendered');
    await page.setViewport({ width: 1920, height: 1080 });
    await page.waitForSelector('h1, .headline', { visible: true });
    console.log('Desktop viewport rendered');
""",
        "accessibility": """
    const focusable = await page.$$eval('button, a, input, select, textarea', (nodes) => nodes.length);
    console.log(`Found ${focusable} focusable elements`);
    const missingAlt = await page.$$eval('img:not([alt])', (nodes) => nodes.length);
    console.log(`Images without alt text: ${missingAlt}`);
""",
        "interactive": """
    const button = await page.waitForSelector('button, [role="button"], .cta, [data-testid="click-btn"]', { visible: true });
    await button.click();
    await page.waitForSelector('.success-message, [data-testid="success"], .result');
    console.log('Action completed successfully');
""",
        "forms": """
    await page.waitForSelector('form, [data-testid="form"]');
    await page.type('[name="email"], #email', 'test@example.com');
    await Promise.all([
      page.waitForNavigation({ waitUntil: 'networkidle0' }),
      page.click('[type="submit"], button[type="submit"]'),
    ]);
    console.log('Form submission successful');
""",
    },
    offline_epilogue="""
    console.log('Test completed successfully');
  } catch (error) {
    console.error('Test failed:', error.message);
    throw error;
  }
}
""",
)


PROFILES: Dict[str, DialectProfile] = {
    PLAYWRIGHT.name: PLAYWRIGHT,
    PUPPETEER.name: PUPPETEER,
}


def get_profile(name: str) -> DialectProfile:
    try:
        return PROFILES[name.lower()]
    except KeyError:
        supported = ", ".join(sorted(PROFILES))
        raise ValidationError(f"Unsupported dialect: {name}. Supported: {supported}") from None
