"""Fixed lookup tables shared by the detectors.

Tables are exposed read-only (tuples and ``MappingProxyType``) and bundled
into per-detector table objects so tests can substitute their own.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

# Languages

SPECIAL_FILENAMES: Mapping[str, str] = MappingProxyType(
    {
        "dockerfile": "Docker",
        "makefile": "Makefile",
    }
)

DOTENV_PREFIX = ".env"
DOTENV_LANGUAGE = "Environment Variables"

EXTENSION_LANGUAGES: Mapping[str, str] = MappingProxyType(
    {
        ".js": "JavaScript",
        ".jsx": "JavaScript",
        ".mjs": "JavaScript",
        ".cjs": "JavaScript",
        ".ts": "TypeScript",
        ".tsx": "TypeScript",
        ".vue": "Vue",
        ".svelte": "Svelte",
        ".html": "HTML",
        ".htm": "HTML",
        ".css": "CSS",
        ".scss": "SCSS",
        ".sass": "SASS",
        ".less": "LESS",
        ".styl": "Stylus",
        ".py": "Python",
        ".pyw": "Python",
        ".pyi": "Python",
        ".java": "Java",
        ".kt": "Kotlin",
        ".kts": "Kotlin",
        ".scala": "Scala",
        ".go": "Go",
        ".rs": "Rust",
        ".php": "PHP",
        ".rb": "Ruby",
        ".cs": "C#",
        ".fs": "F#",
        ".swift": "Swift",
        ".c": "C",
        ".cpp": "C++",
        ".cc": "C++",
        ".cxx": "C++",
        ".h": "C/C++ Header",
        ".hpp": "C++ Header",
        ".sh": "Shell",
        ".bash": "Bash",
        ".zsh": "Zsh",
        ".fish": "Fish",
        ".ps1": "PowerShell",
        ".bat": "Batch",
        ".cmd": "Batch",
        ".json": "JSON",
        ".yaml": "YAML",
        ".yml": "YAML",
        ".toml": "TOML",
        ".xml": "XML",
        ".csv": "CSV",
        ".md": "Markdown",
        ".mdx": "Markdown",
        ".txt": "Text",
        ".ini": "INI",
        ".cfg": "Configuration",
        ".conf": "Configuration",
        ".sql": "SQL",
        ".db": "Database",
        ".sqlite": "SQLite",
        ".dockerfile": "Docker",
        ".lock": "Lock File",
        ".gitignore": "Git Ignore",
        ".editorconfig": "EditorConfig",
        ".prettierrc": "Prettier",
        ".eslintrc": "ESLint",
    }
)

SHEBANG_LANGUAGES: Tuple[Tuple[str, str], ...] = (
    ("python", "Python"),
    ("node", "JavaScript"),
    ("bash", "Bash"),
    ("sh", "Shell"),
)

LANGUAGE_PRIORITIES: Mapping[str, int] = MappingProxyType(
    {
        "TypeScript": 10,
        "JavaScript": 9,
        "Python": 8,
        "Java": 7,
        "Go": 7,
        "Rust": 7,
        "Vue": 7,
        "Svelte": 7,
        "C++": 6,
        "C#": 6,
        "Swift": 6,
        "Kotlin": 6,
        "PHP": 5,
        "Ruby": 5,
        "HTML": 4,
        "CSS": 4,
        "SCSS": 4,
        "SASS": 4,
    }
)

PREFERRED_EXTENSIONS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "JavaScript": (".js", ".jsx"),
        "TypeScript": (".ts", ".tsx"),
    }
)

FORCED_LANGUAGES: Tuple[str, ...] = ("TypeScript", "JavaScript")

# (marker file, language, extension the marker implies)
LANGUAGE_MARKERS: Tuple[Tuple[str, str, str], ...] = (
    ("package.json", "JavaScript", ".js"),
    ("tsconfig.json", "TypeScript", ".ts"),
    ("requirements.txt", "Python", ".py"),
    ("pyproject.toml", "Python", ".py"),
    ("go.mod", "Go", ".go"),
    ("Cargo.toml", "Rust", ".rs"),
    ("pom.xml", "Java", ".java"),
    ("build.gradle", "Java", ".java"),
    ("composer.json", "PHP", ".php"),
    ("Gemfile", "Ruby", ".rb"),
    ("*.csproj", "C#", ".cs"),
)

# Dependencies

TESTING_CATEGORY = "Testing"
OTHER_CATEGORY = "Other"

PACKAGE_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {
        "react": "React Ecosystem",
        "react-dom": "React Ecosystem",
        "react-router": "Routing",
        "react-router-dom": "Routing",
        "redux": "State Management",
        "@reduxjs/toolkit": "State Management",
        "mobx": "State Management",
        "zustand": "State Management",
        "recoil": "State Management",
        "next": "Build Tool",
        "gatsby": "Build Tool",
        "remix": "Build Tool",
        "@remix-run": "Build Tool",
        "vue": "Vue Ecosystem",
        "vue-router": "Routing",
        "vuex": "State Management",
        "pinia": "State Management",
        "nuxt": "Build Tool",
        "@angular/core": "Angular Ecosystem",
        "@angular/common": "Angular Ecosystem",
        "@angular": "Angular Ecosystem",
        "svelte": "Svelte Ecosystem",
        "@sveltejs/kit": "Build Tool",
        "webpack": "Bundler",
        "vite": "Bundler",
        "rollup": "Bundler",
        "parcel": "Bundler",
        "esbuild": "Bundler",
        "babel": "Transpiler",
        "@babel": "Transpiler",
        "typescript": "Compiler",
        "@swc/core": "Compiler",
        "swc": "Compiler",
        "tailwindcss": "CSS Framework",
        "bootstrap": "CSS Framework",
        "sass": "CSS Framework",
        "less": "CSS Framework",
        "@mui/material": "UI Component Library",
        "@material-ui/core": "UI Component Library",
        "material-ui": "UI Component Library",
        "antd": "UI Component Library",
        "@chakra-ui/react": "UI Component Library",
        "chakra-ui": "UI Component Library",
        "styled-components": "CSS-in-JS",
        "@emotion": "CSS-in-JS",
        "emotion": "CSS-in-JS",
        "jest": "Testing",
        "vitest": "Testing",
        "mocha": "Testing",
        "jasmine": "Testing",
        "@testing-library": "Testing",
        "enzyme": "Testing",
        "pytest": "Testing",
        "cypress": "End-to-End Testing",
        "playwright": "End-to-End Testing",
        "@playwright/test": "End-to-End Testing",
        "puppeteer": "End-to-End Testing",
        "chai": "Assertion Library",
        "sinon": "Mocking Library",
        "nyc": "Code Coverage",
        "c8": "Code Coverage",
        "eslint": "Linter",
        "@typescript-eslint": "Linter",
        "stylelint": "Linter",
        "prettier": "Code Formatter",
        "express": "Server Framework",
        "koa": "Server Framework",
        "fastify": "Server Framework",
        "@nestjs": "Server Framework",
        "nestjs": "Server Framework",
        "django": "Server Framework",
        "flask": "Server Framework",
        "fastapi": "Server Framework",
        "actix-web": "Server Framework",
        "rocket": "Server Framework",
        "axum": "Server Framework",
        "laravel/framework": "Server Framework",
        "mongoose": "ORM",
        "prisma": "ORM",
        "@prisma/client": "ORM",
        "typeorm": "ORM",
        "sequelize": "ORM",
        "sqlalchemy": "ORM",
        "diesel": "ORM",
        "mongodb": "Database",
        "pg": "Database",
        "mysql2": "Database",
        "redis": "Database",
        "passport": "Authentication",
        "jsonwebtoken": "Authentication",
        "joi": "Validation",
        "yup": "Validation",
        "zod": "Validation",
        "pydantic": "Validation",
        "lodash": "Utility Library",
        "underscore": "Utility Library",
        "ramda": "Utility Library",
        "moment": "Date Manipulation",
        "dayjs": "Date Manipulation",
        "date-fns": "Date Manipulation",
        "axios": "HTTP Client",
        "node-fetch": "HTTP Client",
        "requests": "HTTP Client",
        "reqwest": "HTTP Client",
        "winston": "Logging",
        "pino": "Logging",
        "graphql": "GraphQL",
        "apollo-server": "GraphQL",
        "apollo-client": "GraphQL",
        "@apollo/client": "GraphQL",
        "webpack-dev-server": "Development Tool",
        "nodemon": "Development Tool",
        "concurrently": "Development Tool",
        "dotenv": "Development Tool",
        "@types/node": "Type Definitions",
        "@types/react": "Type Definitions",
        "@types/jest": "Type Definitions",
        "serde": "Utility Library",
        "tokio": "Utility Library",
    }
)

# (tokens, category, prefix_only) checked in order; prefix rules match the start of the name.
KEYWORD_CATEGORIES: Tuple[Tuple[Tuple[str, ...], str, bool], ...] = (
    (("test", "spec"), "Testing", False),
    (("assert", "expect"), "Assertion Library", False),
    (("mock", "stub"), "Mocking Library", False),
    (("@types/",), "Type Definitions", True),
    (("css", "style"), "CSS Framework", False),
    (("ui", "component"), "UI Component Library", False),
    (("icon",), "Icon Library", False),
    (("date", "time"), "Date Manipulation", False),
    (("fetch", "http", "request"), "HTTP Client", False),
    (("log",), "Logging", False),
    (("db", "database", "sql"), "Database", False),
    (("auth", "jwt", "oauth"), "Authentication", False),
    (("valid", "schema"), "Validation", False),
    (("build", "compile"), "Build Tool", False),
    (("dev", "watch", "hot"), "Development Tool", False),
)

OUTDATED_PATTERNS: Tuple[str, ...] = (
    r"^\^?0\.",
    r"^\^?[0-9]+\.[0-9]+$",
    r"(?i)alpha|beta|rc|dev|snapshot",
)

DEPRECATED_PACKAGES: Tuple[str, ...] = (
    "request",
    "gulp-util",
    "fsevents",
    "hoek",
    "debug",
    "minimatch",
)

LOCK_FILE_MANAGERS: Tuple[Tuple[str, str], ...] = (
    ("package-lock.json", "npm"),
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("bun.lockb", "bun"),
    ("requirements.txt", "pip"),
    ("Cargo.lock", "cargo"),
    ("go.mod", "go"),
    ("composer.lock", "composer"),
    ("Gemfile.lock", "bundler"),
    ("Pipfile.lock", "pipenv"),
    ("poetry.lock", "poetry"),
)

SCRIPT_MANAGERS: Tuple[str, ...] = ("yarn", "pnpm", "bun")

TOML_PRODUCTION_SECTIONS: Tuple[str, ...] = (
    "[dependencies]",
    "[tool.poetry.dependencies]",
)

TOML_DEVELOPMENT_SECTIONS: Tuple[str, ...] = (
    "[dev-dependencies]",
    "[tool.poetry.dev-dependencies]",
    "[tool.poetry.group.dev.dependencies]",
)

# Frontend

FRONTEND_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("React", ("react", "react-dom")),
    ("Vue", ("vue", "@vue/runtime-dom")),
    ("Angular", ("@angular/core",)),
    ("Svelte", ("svelte",)),
    ("Preact", ("preact",)),
    ("SolidJS", ("solid-js",)),
    ("Lit", ("lit", "lit-element")),
    ("Alpine.js", ("alpinejs",)),
    ("jQuery", ("jquery",)),
)

ROUTER_PACKAGES: Tuple[str, ...] = (
    "react-router",
    "react-router-dom",
    "vue-router",
    "svelte-routing",
    "@sveltejs/kit",
    "preact-router",
    "@solidjs/router",
    "@angular/router",
)

STATE_PACKAGES: Tuple[str, ...] = (
    "redux",
    "@reduxjs/toolkit",
    "mobx",
    "zustand",
    "recoil",
    "vuex",
    "pinia",
    "@ngrx/store",
    "@ngxs/store",
)

# (label, packages)
META_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Next.js", ("next",)),
    ("Gatsby", ("gatsby",)),
    ("Remix", ("@remix-run/react", "remix")),
    ("Nuxt.js", ("nuxt", "nuxt3")),
    ("Quasar", ("quasar",)),
    ("SvelteKit", ("@sveltejs/kit",)),
    ("Angular Universal", ("@angular/platform-server",)),
    ("Astro", ("astro",)),
    ("Eleventy", ("@11ty/eleventy",)),
    ("VuePress", ("vuepress",)),
)

VITE_META_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("React", "Vite + React"),
    ("Vue", "Vite + Vue"),
    ("Svelte", "Vite + Svelte"),
)

SSR_META_FRAMEWORKS: Tuple[str, ...] = (
    "Next.js",
    "Remix",
    "Nuxt.js",
    "SvelteKit",
    "Angular Universal",
    "Quasar",
)

STATIC_META_FRAMEWORKS: Tuple[str, ...] = ("Gatsby", "Astro", "Eleventy", "VuePress")

FRONTEND_FEATURE_PACKAGES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "has_typescript": ("typescript",),
        "has_pwa": ("workbox-webpack-plugin", "vite-plugin-pwa", "@vite-pwa/nuxt", "next-pwa"),
        "has_mobile": ("react-native", "@ionic/react", "@ionic/vue", "@capacitor/core"),
        "has_desktop": ("electron", "@tauri-apps/api", "tauri", "@neutralinojs/neu"),
        "has_testing": (
            "jest",
            "vitest",
            "mocha",
            "cypress",
            "@playwright/test",
            "@testing-library/react",
            "@testing-library/vue",
        ),
        "has_storybook": ("@storybook/react", "@storybook/vue3", "@storybook/svelte", "storybook"),
        "has_linting": ("eslint", "stylelint"),
        "has_formatting": ("prettier",),
    }
)

FRONTEND_CONFIG_PATTERNS: Tuple[str, ...] = (
    "next.config.*",
    "nuxt.config.*",
    "svelte.config.*",
    "vue.config.*",
    "vite.config.*",
    "webpack.config.*",
    "rollup.config.*",
    ".parcelrc",
    "angular.json",
    "tsconfig*.json",
    "jest.config.*",
    "vitest.config.*",
    "cypress.config.*",
    "playwright.config.*",
    ".eslintrc*",
    "eslint.config.*",
    ".prettierrc*",
    ".stylelintrc*",
    ".babelrc*",
    "babel.config.*",
    "postcss.config.*",
    "tailwind.config.*",
    "astro.config.*",
    "gatsby-config.*",
)

CSS_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Tailwind CSS", ("tailwindcss",)),
    ("Bootstrap", ("bootstrap", "react-bootstrap")),
    ("Foundation", ("foundation-sites",)),
    ("Bulma", ("bulma",)),
    ("Material-UI", ("@mui/material", "@material-ui/core")),
    ("Ant Design", ("antd",)),
    ("Chakra UI", ("@chakra-ui/react",)),
)

CSS_PREPROCESSORS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Sass", ("sass", "node-sass")),
    ("Less", ("less",)),
    ("Stylus", ("stylus",)),
)

UI_LIBRARIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Styled Components", ("styled-components",)),
    ("Emotion", ("@emotion/styled",)),
    ("Emotion (React)", ("@emotion/react",)),
)

ICON_LIBRARIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Font Awesome", ("@fortawesome/fontawesome-svg-core", "@fortawesome/react-fontawesome")),
    ("React Icons", ("react-icons",)),
    ("Tabler Icons", ("@tabler/icons", "@tabler/icons-react")),
    ("Lucide Icons", ("lucide-react", "lucide-vue-next")),
    ("Heroicons", ("@heroicons/react",)),
)

FORM_LIBRARIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("React Hook Form", ("react-hook-form",)),
    ("Formik", ("formik",)),
    ("VeeValidate", ("vee-validate",)),
)

CHART_LIBRARIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Chart.js", ("chart.js", "react-chartjs-2")),
    ("Recharts", ("recharts",)),
    ("D3", ("d3",)),
    ("ECharts", ("echarts",)),
)

I18N_LIBRARIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("i18next", ("i18next", "react-i18next")),
    ("Vue I18n", ("vue-i18n",)),
    ("FormatJS", ("react-intl",)),
)

BUILD_TOOLS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Vite", ("vite",)),
    ("Webpack", ("webpack",)),
    ("Rollup", ("rollup",)),
    ("Parcel", ("parcel",)),
    ("esbuild", ("esbuild",)),
    ("Snowpack", ("snowpack",)),
)

FRONTEND_SOURCE_DIRS: Tuple[str, ...] = ("src", "app", "pages", "components", "public", "lib")

FRONTEND_ENTRY_POINTS: Tuple[str, ...] = (
    "src/main.js",
    "src/main.ts",
    "src/main.jsx",
    "src/main.tsx",
    "src/index.js",
    "src/index.ts",
    "src/index.jsx",
    "src/index.tsx",
    "src/App.jsx",
    "src/App.tsx",
    "src/App.vue",
    "src/App.svelte",
    "pages/_app.js",
    "pages/_app.tsx",
    "app/layout.tsx",
    "index.html",
)

# (framework, filename patterns) checked in order during verification.
FRONTEND_VERIFICATION: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("React", ("*.jsx", "*.tsx")),
    ("Vue", ("*.vue",)),
    ("Svelte", ("*.svelte",)),
    ("Angular", ("*.component.ts", "*.component.js", "angular.json")),
)

# Backend

RUNTIME_MARKERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Node.js", ("package.json",)),
    ("Python", ("requirements.txt", "pyproject.toml", "setup.py")),
    ("Java", ("pom.xml", "build.gradle", "build.gradle.kts", "build.sbt")),
    ("Go", ("go.mod", "go.sum")),
    ("Rust", ("Cargo.toml", "Cargo.lock")),
    ("PHP", ("composer.json", "composer.lock")),
    ("Ruby", ("Gemfile", "Gemfile.lock")),
    (".NET", ("*.csproj", "*.sln", "*.fsproj")),
)

RUNTIME_PRIORITY: Tuple[str, ...] = (
    "Node.js",
    "Python",
    "Java",
    "Go",
    "Rust",
    "PHP",
    "Ruby",
    ".NET",
)

# (framework name, dependency names, server hint)
NODE_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("Express.js", ("express",), "Express"),
    ("Koa", ("koa",), "Koa"),
    ("Fastify", ("fastify",), "Fastify"),
    ("NestJS", ("@nestjs/core",), "Express/Fastify"),
    ("Hapi", ("@hapi/hapi", "hapi"), "Hapi"),
    ("Sails.js", ("sails",), "Sails"),
    ("Meteor", ("meteor-node-stubs",), "Meteor"),
    ("AdonisJS", ("@adonisjs/core",), "AdonisJS"),
    ("LoopBack", ("@loopback/core", "loopback"), "LoopBack"),
)

SERVERLESS_PACKAGES: Tuple[str, ...] = ("serverless", "@serverless/core", "serverless-http")

PYTHON_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("Django", ("django",), "Django"),
    ("Flask", ("flask",), "Werkzeug"),
    ("FastAPI", ("fastapi",), "Uvicorn"),
    ("Pyramid", ("pyramid",), "Waitress"),
    ("Tornado", ("tornado",), "Tornado"),
)

# Java frameworks match substrings of "group:artifact" coordinates.
JAVA_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("Spring Boot", ("spring-boot-starter", "org.springframework.boot"), "Tomcat/Netty"),
    ("Jakarta EE", ("jakarta.", "javax."), "Application Server"),
    ("Micronaut", ("io.micronaut",), "Netty"),
    ("Quarkus", ("io.quarkus",), "Vert.x"),
    ("Play Framework", ("com.typesafe.play", "org.playframework"), "Akka HTTP"),
    ("Vert.x", ("io.vertx",), "Vert.x"),
)

GO_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("Gin", ("github.com/gin-gonic/gin",), "net/http"),
    ("Echo", ("github.com/labstack/echo",), "net/http"),
    ("Gorilla Mux", ("github.com/gorilla/mux",), "net/http"),
    ("Fiber", ("github.com/gofiber/fiber",), "fasthttp"),
    ("Beego", ("github.com/astaxie/beego", "github.com/beego/beego"), "net/http"),
    ("Revel", ("github.com/revel/revel",), "net/http"),
)

RUST_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("Actix-web", ("actix-web",), "Actix"),
    ("Rocket", ("rocket",), "Rocket"),
    ("Warp", ("warp",), "Hyper"),
    ("Axum", ("axum",), "Tower"),
    ("Tide", ("tide",), "async-std"),
)

PHP_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("Laravel", ("laravel/framework",), "PHP-FPM"),
    ("Symfony", ("symfony/symfony", "symfony/framework-bundle"), "PHP-FPM"),
    ("CodeIgniter", ("codeigniter/framework", "codeigniter4/framework"), "PHP-FPM"),
    ("Slim", ("slim/slim",), "PHP-FPM"),
    ("Laminas", ("laminas/laminas-mvc",), "PHP-FPM"),
    ("Yii", ("yiisoft/yii2",), "PHP-FPM"),
    ("CakePHP", ("cakephp/cakephp",), "PHP-FPM"),
)

RUBY_FRAMEWORKS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("Ruby on Rails", ("rails",), "Puma/Passenger"),
    ("Sinatra", ("sinatra",), "Rack"),
    ("Hanami", ("hanami",), "Puma"),
    ("Padrino", ("padrino",), "Rack"),
)

NODE_FRAMEWORK_PRIORITY: Tuple[str, ...] = (
    "NestJS",
    "Express.js",
    "Fastify",
    "Koa",
    "Hapi",
    "Sails.js",
    "AdonisJS",
    "LoopBack",
    "Meteor",
)

BACKEND_SERVICE_PACKAGES: Mapping[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = MappingProxyType(
    {
        "auth": (
            ("JWT", ("jsonwebtoken", "jose")),
            ("Passport", ("passport",)),
            ("Auth0", ("auth0", "express-openid-connect")),
            ("Firebase", ("firebase-admin",)),
            ("Azure AD", ("@azure/msal-node",)),
        ),
        "caching": (
            ("Redis", ("redis", "ioredis")),
            ("Memcached", ("memcached",)),
            ("In-memory", ("node-cache", "lru-cache")),
        ),
        "messaging": (
            ("Bull (Redis)", ("bull", "bullmq")),
            ("RabbitMQ", ("amqplib",)),
            ("Kafka", ("kafkajs",)),
            ("AWS SQS", ("@aws-sdk/client-sqs",)),
        ),
        "search": (
            ("Elasticsearch", ("@elastic/elasticsearch", "elasticsearch")),
            ("Algolia", ("algoliasearch",)),
        ),
        "monitoring": (
            ("Structured Logging", ("winston", "pino", "bunyan")),
            ("Prometheus", ("prom-client",)),
            ("OpenTelemetry", ("@opentelemetry/api", "@opentelemetry/sdk-node")),
            ("Sentry", ("@sentry/node",)),
        ),
    }
)

BACKEND_FEATURE_PACKAGES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "has_graphql": ("graphql", "apollo-server", "@apollo/server", "type-graphql", "graphene"),
        "has_websockets": ("socket.io", "ws", "channels"),
        "has_testing": ("jest", "mocha", "chai", "supertest", "pytest"),
        "has_queue": ("bull", "bullmq", "amqplib", "kafkajs", "celery", "rq"),
        "has_cron": ("node-cron", "cron", "agenda", "apscheduler"),
        "has_file_upload": ("multer", "formidable", "busboy", "python-multipart"),
        "has_validation": ("joi", "yup", "zod", "class-validator", "express-validator", "pydantic", "marshmallow"),
        "has_docs": ("swagger-ui-express", "swagger-jsdoc", "@nestjs/swagger", "drf-spectacular"),
    }
)

# (database, node package, ORM or "")
NODE_DATABASES: Tuple[Tuple[str, str, str], ...] = (
    ("MongoDB", "mongoose", "Mongoose"),
    ("SQL Database", "typeorm", "TypeORM"),
    ("SQL Database", "sequelize", "Sequelize"),
    ("SQL Database", "prisma", "Prisma"),
    ("SQL Database", "@prisma/client", "Prisma"),
    ("Redis", "redis", ""),
    ("Redis", "ioredis", ""),
    ("Elasticsearch", "@elastic/elasticsearch", ""),
    ("MySQL", "mysql2", ""),
    ("MySQL", "mysql", ""),
    ("PostgreSQL", "pg", ""),
    ("SQLite", "sqlite3", ""),
    ("MongoDB", "mongodb", ""),
    ("Cassandra", "cassandra-driver", ""),
)

# (database, requirement names, ORM or "")
PYTHON_DATABASES: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("PostgreSQL/MySQL", ("psycopg2", "psycopg2-binary", "psycopg", "mysqlclient", "pymysql"), "Django ORM"),
    ("SQL Database", ("sqlalchemy",), "SQLAlchemy"),
    ("MongoDB", ("pymongo", "motor", "mongoengine"), ""),
    ("Redis", ("redis",), ""),
)

ENV_DATABASE_MARKERS: Tuple[Tuple[str, str], ...] = (
    ("MONGO", "MongoDB"),
    ("POSTGRES", "PostgreSQL"),
    ("MYSQL", "MySQL"),
    ("REDIS", "Redis"),
    ("DATABASE_URL", "Database"),
)

BACKEND_ENTRY_POINTS: Tuple[str, ...] = (
    "server.js",
    "server.ts",
    "app.js",
    "app.ts",
    "index.js",
    "index.ts",
    "main.ts",
    "src/server.js",
    "src/server.ts",
    "src/app.js",
    "src/app.ts",
    "src/index.js",
    "src/index.ts",
    "src/main.ts",
    "main.py",
    "app.py",
    "manage.py",
    "wsgi.py",
    "asgi.py",
    "main.go",
    "cmd/main.go",
    "src/main.rs",
    "Program.cs",
    "artisan",
    "config.ru",
)

API_DIR_NAMES: Tuple[str, ...] = ("routes", "controllers", "api", "handlers", "endpoints", "views")
MODEL_DIR_NAMES: Tuple[str, ...] = ("models", "entities", "schemas", "domain")

KUBERNETES_PATTERNS: Tuple[str, ...] = (
    "k8s",
    "kubernetes",
    "deployment.yaml",
    "deployment.yml",
    "service.yaml",
    "ingress.yaml",
    "Chart.yaml",
)

CI_MARKERS: Tuple[str, ...] = (
    ".github/workflows",
    ".gitlab-ci.yml",
    ".travis.yml",
    "azure-pipelines.yml",
    "Jenkinsfile",
    ".circleci",
)

CLOUD_PROVIDERS: Tuple[Tuple[str, str], ...] = (
    ("serverless.yml", "AWS"),
    ("template.yaml", "AWS"),
    ("app.yaml", "Google Cloud"),
    ("azure-pipelines.yml", "Azure"),
    ("vercel.json", "Vercel"),
    ("netlify.toml", "Netlify"),
    ("fly.toml", "Fly.io"),
    ("Procfile", "Heroku"),
)

# (feature flag, filename tokens) for name-based verification.
BACKEND_FILE_FEATURES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("has_rest", ("route", "controller", "router")),
    ("has_graphql", ("resolver", ".graphql", ".gql", "schema.graphql")),
    ("has_websockets", ("socket", "websocket")),
    ("has_queue", ("queue", "worker", "job")),
    ("has_cron", ("cron", "scheduler")),
    ("has_file_upload", ("upload",)),
    ("has_validation", ("validator", "validation")),
    ("has_testing", (".test.", ".spec.", "test_")),
    ("has_docs", ("swagger", "openapi")),
)

API_SOURCE_PATTERNS: Tuple[str, ...] = ("*.js", "*.ts", "*.py")

REST_PATTERNS: Tuple[str, ...] = (
    r"\b(app|router)\.(get|post|put|patch|delete)\s*\(",
    r"@(Get|Post|Put|Patch|Delete)\(",
    r"@(app|router|api)\.(get|post|put|patch|delete|route)\(",
)

GRAPHQL_MARKERS: Tuple[str, ...] = ("gql`", "buildSchema", "typeDefs", "graphene.ObjectType")
WEBSOCKET_MARKERS: Tuple[str, ...] = ("new WebSocket", "socket.io", "WebSocketServer", "websocket")

# Testing

TEST_TOOL_TABLES: Mapping[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = MappingProxyType(
    {
        "frameworks": (
            ("Jest", ("jest",)),
            ("Vitest", ("vitest",)),
            ("Mocha", ("mocha",)),
            ("Jasmine", ("jasmine", "jasmine-core")),
            ("AVA", ("ava",)),
            ("Tape", ("tape",)),
            ("QUnit", ("qunit",)),
            ("pytest", ("pytest",)),
            ("unittest", ("unittest2",)),
            ("JUnit", ("junit",)),
            ("TestNG", ("testng",)),
            ("React Testing Library", ("@testing-library/react",)),
            ("Vue Testing Library", ("@testing-library/vue", "@vue/test-utils")),
            ("Angular Testing Library", ("@testing-library/angular",)),
            ("Svelte Testing Library", ("@testing-library/svelte",)),
            ("Enzyme", ("enzyme",)),
        ),
        "assertion_libraries": (
            ("Chai", ("chai",)),
            ("Node.js assert", ("assert",)),
            ("Power Assert", ("power-assert",)),
            ("Should.js", ("should",)),
            ("Expect.js", ("expect.js",)),
        ),
        "mocking_libraries": (
            ("Sinon.js", ("sinon",)),
            ("Nock", ("nock",)),
            ("Jest Mocks", ("jest-mock",)),
            ("TestDouble", ("testdouble",)),
            ("mock-fs", ("mock-fs",)),
            ("pytest-mock", ("pytest-mock",)),
            ("responses", ("responses",)),
        ),
        "e2e_tools": (
            ("Cypress", ("cypress",)),
            ("Playwright", ("@playwright/test", "playwright")),
            ("Puppeteer", ("puppeteer",)),
            ("Selenium", ("selenium-webdriver", "selenium")),
            ("TestCafe", ("testcafe",)),
            ("Nightwatch.js", ("nightwatch",)),
            ("WebdriverIO", ("webdriverio", "@wdio/cli")),
            ("Protractor", ("protractor",)),
        ),
        "coverage_tools": (
            ("Istanbul/NYC", ("nyc", "istanbul")),
            ("c8", ("c8",)),
            ("Vitest Coverage", ("@vitest/coverage-v8", "@vitest/coverage-istanbul")),
            ("coverage.py", ("coverage", "pytest-cov")),
            ("JaCoCo", ("jacoco",)),
        ),
        "performance_tools": (
            ("autocannon", ("autocannon",)),
            ("wrk", ("wrk",)),
            ("artillery", ("artillery",)),
            ("k6", ("k6",)),
            ("Locust", ("locust",)),
        ),
        "security_tools": (
            ("snyk", ("snyk",)),
            ("npm-audit", ("npm-audit-resolver",)),
            ("owasp-zap", ("zaproxy",)),
            ("Bandit", ("bandit",)),
        ),
        "visual_tools": (
            ("Loki", ("loki",)),
            ("Storybook", ("@storybook/react", "@storybook/vue3", "storybook")),
            ("reg-suit", ("reg-suit",)),
            ("BackstopJS", ("backstopjs",)),
            ("Applitools", ("@applitools/eyes-cypress", "@applitools/eyes-playwright")),
            ("Percy", ("@percy/cli", "@percy/cypress")),
        ),
    }
)

TEST_SCRIPT_KEYS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("test", ("test",)),
    ("test_watch", ("test:watch", "test-watch")),
    ("test_coverage", ("test:coverage", "coverage", "test:cov")),
    ("test_e2e", ("test:e2e", "e2e", "cypress", "playwright")),
    ("test_unit", ("test:unit", "unit")),
    ("test_integration", ("test:integration", "integration")),
)

TEST_CONFIG_PATTERNS: Tuple[str, ...] = (
    "jest.config.*",
    "vitest.config.*",
    ".mocharc*",
    "cypress.config.*",
    "cypress.json",
    "playwright.config.*",
    "karma.conf.*",
    ".nycrc*",
    ".coveragerc",
    "pytest.ini",
    "conftest.py",
    "tox.ini",
    ".github/workflows/*.yml",
    ".github/workflows/*.yaml",
    ".gitlab-ci.yml",
    ".travis.yml",
)

TEST_CONFIG_FEATURES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("parallel", ("maxWorkers", "parallel", "threads", "-n auto", "xdist")),
    ("reporters", ("reporters", "reporter")),
    ("watch", ("watch",)),
    ("debug", ("debug", "inspect")),
    ("isolate", ("isolate",)),
    ("ci", ("CI", "ci:")),
)

TEST_DIR_NAMES: Tuple[str, ...] = (
    "test",
    "tests",
    "__tests__",
    "spec",
    "specs",
    "e2e",
    "cypress",
    "__spec__",
)

FIXTURE_DIR_NAMES: Tuple[str, ...] = ("fixtures", "__fixtures__", "_fixtures", "testdata")
MOCK_DIR_NAMES: Tuple[str, ...] = ("__mocks__", "mocks", "mock")
SNAPSHOT_DIR_NAMES: Tuple[str, ...] = ("__snapshots__", "snapshots")

TEST_FILE_PATTERNS: Tuple[str, ...] = (
    "*.test.js",
    "*.test.jsx",
    "*.test.ts",
    "*.test.tsx",
    "*.spec.js",
    "*.spec.jsx",
    "*.spec.ts",
    "*.spec.tsx",
    "*.cy.js",
    "*.cy.ts",
    "test_*.py",
    "*_test.py",
    "*_test.go",
    "*Test.java",
    "*_spec.rb",
)

TEST_LANGUAGES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("JavaScript", (".js", ".jsx")),
    ("TypeScript", (".ts", ".tsx")),
    ("Python", (".py",)),
    ("Go", (".go",)),
    ("Java", (".java",)),
    ("Ruby", (".rb",)),
)

TEST_CONTENT_MARKERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("has_snapshot_testing", ("toMatchSnapshot", "toMatchInlineSnapshot", "snapshot")),
    ("has_visual_testing", ("cy.screenshot", "page.screenshot", "visual", "percy", "applitools")),
    ("has_performance_testing", ("performance", "benchmark", "load test", "stress")),
    ("has_security_testing", ("security", "vulnerability", "audit", "xss", "injection")),
)

PARALLEL_FRAMEWORKS: Tuple[str, ...] = ("Jest", "Vitest", "AVA")

# Project structure / documentation

PROJECT_CONFIG_PATTERNS: Tuple[str, ...] = (
    "package.json",
    "tsconfig*.json",
    ".eslintrc*",
    "eslint.config.*",
    ".prettierrc*",
    ".stylelintrc*",
    ".editorconfig",
    "Dockerfile",
    "docker-compose*.yml",
    "docker-compose*.yaml",
    ".gitlab-ci.yml",
    ".travis.yml",
    "azure-pipelines.yml",
    "pyproject.toml",
    "setup.cfg",
    "tox.ini",
    ".stackscan.yml",
)

LINT_MARKERS: Tuple[str, ...] = (".eslintrc", "eslint.config", ".prettierrc", ".stylelintrc", "ruff.toml", ".flake8")
DOCKER_MARKERS: Tuple[str, ...] = ("Dockerfile", "docker-compose")

SOURCE_DIR_NAMES: Tuple[str, ...] = ("src", "lib", "app", "components", "pages")
BUILD_OUTPUT_NAMES: Tuple[str, ...] = ("dist", "build", "out", "public", "static")
ENTRY_POINT_PATTERN = r"^(index|main|app)\.(js|ts|jsx|tsx|vue|svelte|py)$"

DOCUMENTATION_FILES: Tuple[str, ...] = (
    "README.md",
    "README.rst",
    "README.txt",
    "README",
    "docs",
    "documentation",
    "CHANGELOG.md",
    "CONTRIBUTING.md",
    "LICENSE",
    "LICENSE.md",
    "LICENSE.txt",
)

# Workspace

WORKSPACE_MANIFESTS: Tuple[str, ...] = (
    "package.json",
    "requirements.txt",
    "pyproject.toml",
    "Cargo.toml",
    "composer.json",
    "pom.xml",
    "build.gradle",
    "go.mod",
)

WORKSPACE_TYPE_HINTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("frontend", ("/client", "/frontend", "/web", "/ui")),
    ("backend", ("/server", "/backend", "/api")),
    ("service", ("/service",)),
)
