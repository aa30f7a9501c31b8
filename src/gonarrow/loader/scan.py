from __future__ import annotations

import json
import logging
import re
import subprocess
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from ..errors import ResolutionError, ToolchainError

logger = logging.getLogger(__name__)

MIN_GO_VERSION = "1.22"

# An older local toolchain either refuses the go directive or tries to
# fails to download a newer one.
_GO_TOO_OLD_RE = re.compile(
    r"("
    r"requires go >= "
    r"|go: download go1\.\d+"
    r"|toolchain not available"
    r"|go\.mod requires go"
    r"|undefined: types\.Unalias"
    r")",
    re.IGNORECASE,
)


def scan_types(
    *,
    dir: Path,
    requests: Mapping[str, Sequence[str]],
    go: str = "go",
    env: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Describe the requested named types by reading compiler export data.

    `requests` maps a package import path to the type names wanted from it.
    Packages are resolved with `go list` from `dir`, so they may live in the
    module at `dir` or in any of its dependencies. Returns the decoded JSON
    document `{"types": [...]}`; see `TypeRegistry.from_scan`.

    The scanner needs Go 1.22 or newer on PATH (or in
    GONARROW_GO); an older toolchain raises `ToolchainError`.
    """
    dir = Path(dir).resolve()
    args = [f"{pkg}:{','.join(names)}" for pkg, names in sorted(requests.items())]

    with tempfile.TemporaryDirectory(prefix="gonarrow-goscan-") as td:
        scan_dir = Path(td)
        (scan_dir / "go.mod").write_text(
            "\n".join(
                [
                    "module gonarrow.goscan",
                    "",
                    f"go {MIN_GO_VERSION}",
                    "",
                ]
            ),
            encoding="utf-8",
        )
        (scan_dir / "main.go").write_text(_scanner_go_source(), encoding="utf-8")

        cmd = [go, "run", ".", "--dir", str(dir), *args]
        logger.info("loading %d types from %d packages", sum(len(v) for v in requests.values()), len(requests))
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(scan_dir),
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=False,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolchainError(
                f"Go toolchain not found (`{go}` is missing from PATH). "
                "Install Go and ensure `go` is available on PATH, or set GONARROW_GO."
            ) from e

        stdout = (proc.stdout or b"").decode("utf-8", errors="replace")
        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        if proc.returncode != 0:
            if _GO_TOO_OLD_RE.search(stderr):
                raise ToolchainError(
                    f"the go type scanner needs Go {MIN_GO_VERSION} or newer; "
                    f"`{go}` is older and could not switch toolchains:\n{stderr}"
                )
            raise ResolutionError(f"go type scan failed\n{stderr}{stdout}")

        # Toolchain notices may precede the document; start at the first object.
        start = stdout.find("{")
        if start == -1:
            raise ResolutionError(f"go type scan produced no output\n{stderr}")
        try:
            obj = json.loads(stdout[start:])
        except Exception as e:  # noqa: BLE001
            raise ResolutionError(f"failed to parse go type scan output: {e}\n{stdout}") from e
        if not isinstance(obj, dict):
            raise ResolutionError("go type scan output is not a JSON object")
        return obj


def _scanner_go_source() -> str:
    # Keep this file stdlib-only so `go run` doesn't need network access.
    return r'''
package main

import (
	"bytes"
	"encoding/json"
	"errors"
	"flag"
	"fmt"
	"go/importer"
	"go/token"
	"go/types"
	"io"
	"os"
	"os/exec"
	"strings"
)

type goListPkg struct {
	ImportPath string
	Export     string
	Error      *struct {
		Err string
	}
}

type request struct {
	pkg   string
	names []string
}

type outNamed struct {
	Name       string   `json:"name"`
	Pkg        string   `json:"pkg"`
	Methods    []any    `json:"methods"`
	TypeParams []string `json:"type_params"`
}

type outType struct {
	Pkg   string    `json:"pkg"`
	Name  string    `json:"name"`
	Error string    `json:"error,omitempty"`
	Type  *outNamed `json:"type,omitempty"`
}

var basicNames = map[types.BasicKind]string{
	types.Bool:           "bool",
	types.Int:            "int",
	types.Int8:           "int8",
	types.Int16:          "int16",
	types.Int32:          "int32",
	types.Int64:          "int64",
	types.Uint:           "uint",
	types.Uint8:          "uint8",
	types.Uint16:         "uint16",
	types.Uint32:         "uint32",
	types.Uint64:         "uint64",
	types.Uintptr:        "uintptr",
	types.Float32:        "float32",
	types.Float64:        "float64",
	types.Complex64:      "complex64",
	types.Complex128:     "complex128",
	types.String:         "string",
	types.UnsafePointer:  "unsafe_pointer",
	types.UntypedBool:    "untyped_bool",
	types.UntypedInt:     "untyped_int",
	types.UntypedRune:    "untyped_rune",
	types.UntypedFloat:   "untyped_float",
	types.UntypedComplex: "untyped_complex",
	types.UntypedString:  "untyped_string",
	types.UntypedNil:     "untyped_nil",
}

func main() {
	var dir string
	flag.StringVar(&dir, "dir", "", "directory to resolve packages from")
	flag.Parse()

	if dir == "" {
		fmt.Fprintln(os.Stderr, "missing --dir")
		os.Exit(2)
	}
	if err := os.Chdir(dir); err != nil {
		fmt.Fprintf(os.Stderr, "chdir: %v\n", err)
		os.Exit(2)
	}

	reqs := []request{}
	paths := []string{}
	for _, arg := range flag.Args() {
		pkg, names, ok := strings.Cut(arg, ":")
		if !ok || pkg == "" || names == "" {
			fmt.Fprintf(os.Stderr, "invalid request %q\n", arg)
			os.Exit(2)
		}
		reqs = append(reqs, request{pkg: pkg, names: strings.Split(names, ",")})
		paths = append(paths, pkg)
	}

	exports, pkgErrs, err := listExports(paths)
	if err != nil {
		fmt.Fprintln(os.Stderr, err.Error())
		os.Exit(1)
	}

	fset := token.NewFileSet()
	imp := importer.ForCompiler(fset, "gc", func(path string) (io.ReadCloser, error) {
		f, ok := exports[path]
		if !ok || f == "" {
			return nil, fmt.Errorf("no export data for %s", path)
		}
		return os.Open(f)
	})

	out := []outType{}
	for _, r := range reqs {
		var p *types.Package
		loadErr := pkgErrs[r.pkg]
		if loadErr == "" {
			p, err = imp.Import(r.pkg)
			if err != nil {
				loadErr = err.Error()
			}
		}
		for _, name := range r.names {
			o := outType{Pkg: r.pkg, Name: name}
			if loadErr != "" {
				o.Error = "cannot load package: " + loadErr
				out = append(out, o)
				continue
			}
			o.Type, o.Error = describeNamed(p, name)
			out = append(out, o)
		}
	}

	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	_ = enc.Encode(map[string]any{"types": out})
}

func listExports(paths []string) (map[string]string, map[string]string, error) {
	args := append([]string{"list", "-e", "-json", "-export", "-deps"}, paths...)
	goBin := os.Getenv("GONARROW_GO")
	if goBin == "" {
		goBin = "go"
	}
	cmd := exec.Command(goBin, args...)
	var buf, errBuf bytes.Buffer
	cmd.Stdout = &buf
	cmd.Stderr = &errBuf
	if err := cmd.Run(); err != nil {
		return nil, nil, fmt.Errorf("go list failed: %v\n%s", err, errBuf.String())
	}

	exports := map[string]string{}
	pkgErrs := map[string]string{}
	dec := json.NewDecoder(&buf)
	for {
		var p goListPkg
		if err := dec.Decode(&p); err != nil {
			if errors.Is(err, io.EOF) {
				break
			}
			return nil, nil, fmt.Errorf("failed to decode go list json: %v", err)
		}
		exports[p.ImportPath] = p.Export
		if p.Error != nil {
			pkgErrs[p.ImportPath] = strings.TrimSpace(p.Error.Err)
		}
	}
	for _, path := range paths {
		if _, ok := exports[path]; !ok && pkgErrs[path] == "" {
			pkgErrs[path] = "package not found"
		}
	}
	return exports, pkgErrs, nil
}

func describeNamed(p *types.Package, name string) (*outNamed, string) {
	obj := p.Scope().Lookup(name)
	if obj == nil {
		return nil, "no such type"
	}
	tn, ok := obj.(*types.TypeName)
	if !ok {
		return nil, "not a type"
	}
	named, ok := types.Unalias(tn.Type()).(*types.Named)
	if !ok {
		return nil, "not a defined type"
	}
	o := &outNamed{
		Name:       named.Obj().Name(),
		Pkg:        p.Path(),
		Methods:    []any{},
		TypeParams: []string{},
	}
	if named.Obj().Pkg() != nil {
		o.Pkg = named.Obj().Pkg().Path()
	}
	if tps := named.TypeParams(); tps != nil {
		for i := 0; i < tps.Len(); i++ {
			o.TypeParams = append(o.TypeParams, tps.At(i).Obj().Name())
		}
	}
	if iface, ok := named.Underlying().(*types.Interface); ok {
		for i := 0; i < iface.NumMethods(); i++ {
			o.Methods = append(o.Methods, encodeMethod(iface.Method(i)))
		}
	} else {
		// The method set of *T holds value, pointer and promoted methods.
		ms := types.NewMethodSet(types.NewPointer(named))
		for i := 0; i < ms.Len(); i++ {
			if f, ok := ms.At(i).Obj().(*types.Func); ok {
				o.Methods = append(o.Methods, encodeMethod(f))
			}
		}
	}
	return o, ""
}

func encodeMethod(f *types.Func) map[string]any {
	return map[string]any{
		"name": f.Name(),
		"sig":  encodeType(f.Type()),
	}
}

func encodeVars(t *types.Tuple) []any {
	out := []any{}
	if t == nil {
		return out
	}
	for i := 0; i < t.Len(); i++ {
		v := t.At(i)
		out = append(out, map[string]any{"name": v.Name(), "type": encodeType(v.Type())})
	}
	return out
}

func encodeType(t types.Type) map[string]any {
	switch x := types.Unalias(t).(type) {
	case *types.Named:
		m := map[string]any{"kind": "named", "name": x.Obj().Name(), "pkg": ""}
		if x.Obj().Pkg() != nil {
			m["pkg"] = x.Obj().Pkg().Path()
		}
		if args := x.TypeArgs(); args != nil && args.Len() > 0 {
			list := []any{}
			for i := 0; i < args.Len(); i++ {
				list = append(list, encodeType(args.At(i)))
			}
			m["type_args"] = list
		}
		return m
	case *types.Array:
		return map[string]any{"kind": "array", "len": x.Len(), "elem": encodeType(x.Elem())}
	case *types.Slice:
		return map[string]any{"kind": "slice", "elem": encodeType(x.Elem())}
	case *types.Map:
		return map[string]any{"kind": "map", "key": encodeType(x.Key()), "elem": encodeType(x.Elem())}
	case *types.Chan:
		dir := "both"
		switch x.Dir() {
		case types.SendOnly:
			dir = "send"
		case types.RecvOnly:
			dir = "recv"
		}
		return map[string]any{"kind": "chan", "dir": dir, "elem": encodeType(x.Elem())}
	case *types.Basic:
		name, ok := basicNames[x.Kind()]
		if !ok {
			name = "invalid"
		}
		return map[string]any{"kind": "basic", "name": name}
	case *types.Interface:
		methods := []any{}
		for i := 0; i < x.NumMethods(); i++ {
			methods = append(methods, encodeMethod(x.Method(i)))
		}
		return map[string]any{"kind": "interface", "methods": methods, "method_set": x.IsMethodSet()}
	case *types.Signature:
		return map[string]any{
			"kind":     "signature",
			"params":   encodeVars(x.Params()),
			"results":  encodeVars(x.Results()),
			"variadic": x.Variadic(),
		}
	case *types.Struct:
		fields := []any{}
		for i := 0; i < x.NumFields(); i++ {
			f := x.Field(i)
			fields = append(fields, map[string]any{
				"name":     f.Name(),
				"type":     encodeType(f.Type()),
				"embedded": f.Embedded(),
				"tag":      x.Tag(i),
			})
		}
		return map[string]any{"kind": "struct", "fields": fields}
	case *types.Pointer:
		return map[string]any{"kind": "pointer", "elem": encodeType(x.Elem())}
	case *types.TypeParam:
		return map[string]any{"kind": "typeparam", "name": x.Obj().Name()}
	default:
		return map[string]any{"kind": "unsupported", "what": fmt.Sprintf("%T", t)}
	}
}
'''
