"""Jinja templates for project and solution documents."""

from __future__ import annotations

from xml.sax.saxutils import escape

from jinja2 import DictLoader, Environment, StrictUndefined, Template

NEWLINE = "\r\n"

PROJECT_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<Project ToolsVersion="4.0" DefaultTargets="Build" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <PropertyGroup>
    <LangVersion>{{ p.lang_version | xml }}</LangVersion>
  </PropertyGroup>
  <PropertyGroup>
    <Configuration Condition=" '$(Configuration)' == '' ">Debug</Configuration>
    <Platform Condition=" '$(Platform)' == '' ">AnyCPU</Platform>
    <ProductVersion>10.0.20506</ProductVersion>
    <SchemaVersion>2.0</SchemaVersion>
    <RootNamespace>{{ p.root_namespace | xml }}</RootNamespace>
    <ProjectGuid>{{ '{' ~ p.project_guid ~ '}' }}</ProjectGuid>
    <OutputType>Library</OutputType>
    <AppDesignerFolder>Properties</AppDesignerFolder>
    <AssemblyName>{{ p.assembly_name | xml }}</AssemblyName>
    <TargetFrameworkVersion>v4.7.1</TargetFrameworkVersion>
    <FileAlignment>512</FileAlignment>
    <BaseDirectory>.</BaseDirectory>
  </PropertyGroup>
  <PropertyGroup>
    <NoConfig>true</NoConfig>
    <NoStdLib>true</NoStdLib>
    <AddAdditionalExplicitAssemblyReferences>false</AddAdditionalExplicitAssemblyReferences>
    <ImplicitlyExpandNETStandardFacades>false</ImplicitlyExpandNETStandardFacades>
    <ImplicitlyExpandDesignTimeFacades>false</ImplicitlyExpandDesignTimeFacades>
  </PropertyGroup>
  <PropertyGroup Condition=" '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' ">
    <DebugSymbols>true</DebugSymbols>
    <DebugType>full</DebugType>
    <Optimize>false</Optimize>
    <OutputPath>{{ p.output_path | xml }}</OutputPath>
    <DefineConstants>{{ p.defines | join(';') | xml }}</DefineConstants>
    <ErrorReport>prompt</ErrorReport>
    <WarningLevel>4</WarningLevel>
    <NoWarn>0169</NoWarn>
    <AllowUnsafeBlocks>{{ p.unsafe }}</AllowUnsafeBlocks>
  </PropertyGroup>
  <PropertyGroup Condition=" '$(Configuration)|$(Platform)' == 'Release|AnyCPU' ">
    <DebugType>pdbonly</DebugType>
    <Optimize>true</Optimize>
    <OutputPath>Temp\\bin\\Release\\</OutputPath>
    <ErrorReport>prompt</ErrorReport>
    <WarningLevel>4</WarningLevel>
    <NoWarn>0169</NoWarn>
    <AllowUnsafeBlocks>{{ p.unsafe }}</AllowUnsafeBlocks>
  </PropertyGroup>
{% if p.ruleset_path or p.analyzers %}
  <PropertyGroup>
{% if p.ruleset_path %}
    <CodeAnalysisRuleSet>{{ p.ruleset_path | xml }}</CodeAnalysisRuleSet>
{% endif %}
  </PropertyGroup>
{% endif %}
{% if p.analyzers %}
  <ItemGroup>
{% for analyzer in p.analyzers %}
    <Analyzer Include="{{ analyzer | xml }}" />
{% endfor %}
  </ItemGroup>
{% endif %}
  <PropertyGroup>
    <ProjectGenerator>projgen</ProjectGenerator>
    <ProjectGeneratorVersion>{{ p.flavoring_package_version | xml }}</ProjectGeneratorVersion>
    <HostProjectType>{{ p.flavoring_project_type | xml }}</HostProjectType>
    <HostBuildTarget>{{ p.flavoring_build_target | xml }}</HostBuildTarget>
    <HostVersion>{{ p.flavoring_host_version | xml }}</HostVersion>
  </PropertyGroup>
  <ItemGroup>
{% for line in compile_lines %}
{{ line }}
{% endfor %}
  </ItemGroup>
{% if additional_assets %}
  <ItemGroup>
{{ additional_assets }}
  </ItemGroup>
{% endif %}
  <ItemGroup>
{% for line in reference_lines %}
{{ line }}
{% endfor %}
  </ItemGroup>
{% if has_assembly_references %}
  <ItemGroup>
{% for line in project_reference_lines %}
{{ line }}
{% endfor %}
  </ItemGroup>
{% endif %}
  <Import Project="$(MSBuildToolsPath)\\Microsoft.CSharp.targets" />
  <!-- To modify your build process, add your task inside one of the targets below and uncomment it.
       Other similar extension points exist, see Microsoft.Common.targets.
  <Target Name="BeforeBuild">
  </Target>
  <Target Name="AfterBuild">
  </Target>
  -->
</Project>
"""

SOLUTION_TEMPLATE = """\
Microsoft Visual Studio Solution File, Format Version 12.00
# Visual Studio 15
VisualStudioVersion = 15.0.28307.1267
MinimumVisualStudioVersion = 10.0.40219.1
{% for project in projects %}
Project("{{ '{' ~ project_type_guid ~ '}' }}") = "{{ project.name }}", "{{ project.file_name }}", "{{ '{' ~ project.guid ~ '}' }}"
EndProject
{% endfor %}
Global
    GlobalSection(SolutionConfigurationPlatforms) = preSolution
{% for configuration in configurations %}
        {{ configuration }}|Any CPU = {{ configuration }}|Any CPU
{% endfor %}
    EndGlobalSection
    GlobalSection(ProjectConfigurationPlatforms) = postSolution
{% for project in projects %}
{% for configuration in configurations %}
        {{ '{' ~ project.guid ~ '}' }}.{{ configuration }}|Any CPU.ActiveCfg = {{ configuration }}|Any CPU
        {{ '{' ~ project.guid ~ '}' }}.{{ configuration }}|Any CPU.Build.0 = {{ configuration }}|Any CPU
{% endfor %}
{% endfor %}
    EndGlobalSection
    GlobalSection(SolutionProperties) = preSolution
        HideSolutionNode = FALSE
    EndGlobalSection
EndGlobal
"""


def xml_escape(value: object) -> str:
    return escape(str(value), {'"': "&quot;", "'": "&apos;"})


def _create_env() -> Environment:
    env = Environment(
        loader=DictLoader({"project.csproj.j2": PROJECT_TEMPLATE, "solution.sln.j2": SOLUTION_TEMPLATE}),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        newline_sequence=NEWLINE,
        undefined=StrictUndefined,
    )
    env.filters["xml"] = xml_escape
    return env


_ENV = _create_env()


def get_template(name: str) -> Template:
    return _ENV.get_template(name)


__all__ = ["NEWLINE", "get_template", "xml_escape"]
