"""
Pytest configuration and fixtures.

Использование:
    pytest tests/ -v
"""

import json
import textwrap
from pathlib import Path

import pytest

from pwaudit.config import get_settings
from pwaudit.core.fs_cache import FileCache, use_cache


# ═══════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════

def write(root: Path, relative: str, content: str = "") -> Path:
    """Создать файл (и родительские директории) с текстом без отступов."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


PLAYWRIGHT_CONFIG = """
    import { defineConfig } from '@playwright/test';
    import 'dotenv/config';

    export default defineConfig({
      testDir: './tests',
      timeout: 30000,
      retries: process.env.CI ? 2 : 1,
      workers: process.env.CI ? 4 : 2,
      fullyParallel: true,
      forbidOnly: !!process.env.CI,
      reporter: [['html'], ['list'], ['./reporters/slack-reporter.ts']],
      outputDir: 'test-results',
      use: {
        baseURL: process.env.BASE_URL,
        headless: true,
        trace: 'on-first-retry',
        screenshot: 'only-on-failure',
        video: 'retain-on-failure',
        storageState: '.auth/user.json',
      },
      projects: [{ name: 'chromium' }],
    });
"""

LOGIN_SPEC = """
    import { test, expect } from '../src/fixtures/base';

    test.describe('login @smoke', () => {
      test('user can sign in @smoke', async ({ page }) => {
        await page.route('**/api/profile', (route) => route.fulfill({ status: 200, body: '{}' }));
        await page.goto('/login');
        await page.getByRole('textbox', { name: 'Email' }).fill('user@example.com');
        await page.getByTestId('submit').click();
        await expect(page.getByText('Welcome')).toBeVisible();
      });
    });
"""

BRITTLE_SPEC = """
    import { test } from '@playwright/test';

    test('legacy checkout', async ({ page }) => {
      await page.locator('//div[@id="cart"]').click();
      await page.waitForTimeout(5000);
      await page.locator('li:nth-child(3)').nth(2).click();
    });
"""

FIXTURES = """
    import { test as base } from '@playwright/test';
    import { LoginPage } from '../pages/LoginPage';

    export const test = base.extend<{ loginPage: LoginPage }>({
      loginPage: async ({ page }, use) => {
        await use(new LoginPage(page));
      },
    });
    export { expect } from '@playwright/test';
"""

LOGIN_PAGE = """
    import type { Page } from '@playwright/test';

    export class LoginPage {
      constructor(private readonly page: Page) {}
    }
"""

REPORTER = """
    import type { Reporter, TestCase, TestResult } from '@playwright/test/reporter';

    export default class SlackReporter implements Reporter {
      onBegin() {}
      onTestEnd(test: TestCase, result: TestResult) {}
      onEnd() {
        return fetch('https://hooks.slack.com/services/T000/B000/XXXX', { method: 'POST' });
      }
    }
"""

WORKFLOW = """
    name: e2e
    on:
      pull_request:
    concurrency:
      group: e2e-${{ github.ref }}
      cancel-in-progress: true
    jobs:
      test:
        runs-on: ubuntu-latest
        steps:
          - uses: actions/checkout@v4
          - uses: actions/setup-node@v4
            with:
              cache: 'npm'
          - run: npm ci
          - run: npx playwright install --with-deps
          - run: npx playwright test --retries 2
          - uses: actions/upload-artifact@v4
            with:
              name: playwright-report
              path: playwright-report/
              retention-days: 14
"""


# ═══════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def sample_project(tmp_path) -> Path:
    """Небольшой, но реалистичный Playwright-проект."""
    root = tmp_path / "e2e-project"
    root.mkdir()

    package = {
        "name": "e2e-project",
        "type": "module",
        "engines": {"node": ">=20"},
        "scripts": {
            "test": "playwright test",
            "test:smoke": "playwright test --grep @smoke",
            "lint": "eslint . --ext .ts",
            "format": "prettier --check .",
            "typecheck": "tsc --noEmit",
            "clean": "rimraf test-results playwright-report",
        },
        "devDependencies": {
            "@playwright/test": "^1.47.0",
            "typescript": "^5.5.0",
            "eslint": "^9.0.0",
            "@typescript-eslint/parser": "^8.0.0",
            "@typescript-eslint/eslint-plugin": "^8.0.0",
            "prettier": "^3.3.0",
            "dotenv": "^16.4.0",
            "zod": "^3.23.0",
        },
    }
    write(root, "package.json", json.dumps(package, indent=2))
    write(root, "package-lock.json", "{}")
    write(root, "playwright.config.ts", PLAYWRIGHT_CONFIG)
    write(root, "tsconfig.json", json.dumps({"compilerOptions": {"strict": True}}))
    write(root, ".gitignore", "node_modules/\n.env\ntest-results/\n")
    write(root, ".env.example", "BASE_URL=\n")
    write(root, ".env.qa", "BASE_URL=https://qa.example.com\n")
    write(root, "README.md", "# e2e\n")
    write(root, ".editorconfig", "root = true\n")
    write(root, "eslint.config.js", "export default [];\n")
    write(root, ".prettierrc", "{}\n")

    write(root, "tests/login.spec.ts", LOGIN_SPEC)
    write(root, "tests/checkout.spec.ts", BRITTLE_SPEC)
    write(root, "src/fixtures/base.ts", FIXTURES)
    write(root, "src/pages/LoginPage.ts", LOGIN_PAGE)
    write(root, "src/utils/random.ts", "export const id = () => Math.random();\n")
    write(root, "reporters/slack-reporter.ts", REPORTER)
    write(root, "src/reporters/slack-reporter.ts", REPORTER)
    write(root, ".github/workflows/e2e.yml", WORKFLOW)

    # Мусор, который не должен попадать в обход
    write(root, "node_modules/pkg/index.spec.ts", "test.only('x', () => {});\n")
    write(root, "tests/node_modules/pkg/index.spec.ts", "test.only('x', () => {});\n")
    return root


@pytest.fixture
def empty_project(tmp_path) -> Path:
    root = tmp_path / "empty"
    root.mkdir()
    return root


@pytest.fixture
def plugin_dir(tmp_path) -> Path:
    """Пустая директория для пользовательских анализаторов."""
    path = tmp_path / "plugins"
    path.mkdir()
    return path


@pytest.fixture
def file_cache():
    """Отдельный кэш файлов на тест."""
    with use_cache(FileCache()) as cache:
        yield cache


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Settings не должны зависеть от окружения разработчика."""
    for name in ("PWAUDIT_OUT_DIR", "PWAUDIT_DEBUG", "PWAUDIT_JSON_ONLY", "PWAUDIT_ANALYZER_PATHS"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
