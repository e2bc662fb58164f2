GRAPH_HTML = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>memviz - Memory Graph</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body { background: #f8f9fa; font-family: -apple-system, sans-serif; overflow: hidden; }
        #graph { width: 100vw; height: 100vh; }

        #toolbar {
            position: absolute; top: 12px; left: 12px; z-index: 10;
            display: flex; gap: 8px; align-items: center;
            background: #ffffff; padding: 8px 12px; border-radius: 8px;
            border: 1px solid #dee2e6; font-size: 12px;
        }
        #toolbar select, #toolbar input, #toolbar button, #toolbar a {
            font-size: 12px; padding: 4px 8px; border: 1px solid #ced4da; border-radius: 4px;
            background: #fff; color: #212529; text-decoration: none;
        }
        #stats { color: #6c757d; margin-left: 8px; }

        #legend {
            position: absolute; bottom: 12px; left: 12px; z-index: 10;
            background: #ffffff; padding: 8px 12px; border-radius: 8px;
            border: 1px solid #dee2e6; font-size: 11px; max-height: 40vh; overflow-y: auto;
        }
        .legend-item { display: flex; align-items: center; padding: 3px 0; cursor: pointer; }
        .legend-dot { width: 10px; height: 10px; border-radius: 50%; margin-right: 8px; }
        .legend-count { margin-left: auto; padding-left: 16px; color: #6c757d; }

        #details {
            position: absolute; top: 12px; right: 12px; z-index: 10; width: 320px;
            background: #ffffff; padding: 12px; border-radius: 8px; border: 1px solid #dee2e6;
            font-size: 12px; max-height: 90vh; overflow-y: auto; display: none;
        }
        #details h2 { font-size: 15px; margin-bottom: 4px; }
        #details .type { color: #6c757d; margin-bottom: 8px; }
        #details li { margin: 4px 0 4px 16px; }
        #details .meta { color: #adb5bd; font-size: 10px; }
        #details .conn { cursor: pointer; color: #0d6efd; }

        #tooltip {
            position: absolute; z-index: 20; pointer-events: none; display: none;
            background: rgba(33,37,41,0.92); color: #f8f9fa; padding: 8px 10px;
            border-radius: 6px; font-size: 11px; max-width: 320px;
        }
        #tooltip .title { font-weight: 600; }
        #tooltip .subtitle { color: #adb5bd; margin-bottom: 4px; }
    </style>
    <script src="https://unpkg.com/3d-force-graph"></script>
    <script src="https://unpkg.com/force-graph"></script>
    <script src="https://unpkg.com/d3-force-3d"></script>
</head>
<body>
    <div id="graph"></div>
    <div id="toolbar">
        <select id="database"></select>
        <select id="layout">
            <option value="force">Force</option>
            <option value="circle">Circle</option>
            <option value="grid">Grid</option>
            <option value="cube">Cube</option>
            <option value="sphere">Sphere</option>
            <option value="hierarchical">Hierarchical</option>
            <option value="concentric">Concentric</option>
        </select>
        <input id="search" type="search" placeholder="Search nodes...">
        <button id="fit">Fit</button>
        <button id="reset">Reset</button>
        <a id="export" href="/api/session/export.png">Export PNG</a>
        <span id="stats"></span>
    </div>
    <div id="legend"></div>
    <div id="details"></div>
    <div id="tooltip"></div>

    <script>
    const el = id => document.getElementById(id);
    let graph = null;
    let dimensions = 3;
    let sceneVersion = -1;
    let nodeKey = '';
    let mouse = { x: 0, y: 0 };

    function withOpacity(color, opacity) {
        if (opacity === undefined || opacity >= 1 || !/^#[0-9a-f]{6}$/i.test(color || '')) return color;
        const v = parseInt(color.slice(1), 16);
        return `rgba(${(v >> 16) & 255}, ${(v >> 8) & 255}, ${v & 255}, ${opacity})`;
    }

    async function api(method, path, body) {
        const res = await fetch(path, {
            method,
            headers: body ? { 'Content-Type': 'application/json' } : {},
            body: body ? JSON.stringify(body) : undefined,
        });
        if (!res.ok) throw new Error((await res.json()).detail || res.statusText);
        return res.json();
    }

    function createGraph() {
        const Factory = dimensions === 2 ? ForceGraph : ForceGraph3D;
        graph = Factory()(el('graph'))
            .backgroundColor('#f8f9fa')
            .nodeId('id')
            .nodeLabel(() => '')
            .nodeColor(n => withOpacity(n.color, n.opacity))
            .nodeVal(n => n.size / 6)
            .linkColor(l => withOpacity(l.color, l.opacity))
            .linkWidth(l => l.width)
            .linkDirectionalParticles(l => l.particles)
            .linkDirectionalArrowLength(2)
            .linkDirectionalArrowRelPos(1)
            .onNodeHover(n => n ? api('POST', '/api/session/hover', { kind: 'node', id: n.id }) : api('DELETE', '/api/session/hover'))
            .onLinkHover(l => l ? api('POST', '/api/session/hover', { kind: 'link', id: l.id }) : api('DELETE', '/api/session/hover'))
            .onNodeClick(n => api('POST', '/api/session/select', { node_id: n.id }))
            .onBackgroundClick(() => api('DELETE', '/api/session/selection'));
        if (dimensions === 3) graph.nodeOpacity(1.0).linkOpacity(1.0);
    }

    function applyForce(force) {
        if (!force) return;
        graph.d3Force('charge').strength(force.chargeStrength);
        graph.d3Force('link').distance(force.linkDistance);
        graph.d3AlphaDecay(force.alphaDecay).d3VelocityDecay(force.velocityDecay)
            .warmupTicks(force.warmupTicks).cooldownTicks(force.cooldownTicks || Infinity);
        const centers = force.centerForces || {};
        const axes = { x: d3.forceX, y: d3.forceY, z: d3.forceZ };
        Object.keys(axes).forEach(axis => {
            if (axis === 'z' && dimensions === 2) return;
            graph.d3Force(axis, centers[axis] ? axes[axis](0).strength(centers[axis]) : null);
        });
    }

    function liveCamera(camera) {
        // Re-aim at the node where the browser simulation has it now
        const node = camera.nodeId && graph.graphData().nodes.find(n => n.id === camera.nodeId);
        if (!node || node.x === undefined) return camera;
        const x = node.x, y = node.y, z = dimensions === 2 ? 0 : (node.z || 0);
        const d = camera.distance;
        if (dimensions === 2) return { ...camera, position: { x, y, z: d }, lookAt: { x, y, z: 0 } };
        const length = Math.hypot(x, y, z);
        if (length === 0) return { ...camera, position: { x: 0, y: 0, z: d }, lookAt: { x: 0, y: 0, z: 0 } };
        const ratio = 1 + d / length;
        return { ...camera, position: { x: x * ratio, y: y * ratio, z: z * ratio }, lookAt: { x, y, z } };
    }

    function applyScene(scene) {
        if (scene.version === sceneVersion) return;
        sceneVersion = scene.version;
        if (!graph || scene.dimensions !== dimensions) {
            dimensions = scene.dimensions;
            createGraph();
            nodeKey = '';
        }
        const frame = scene.frame;
        const key = frame.nodes.map(n => n.id).join('|') + '#' + frame.links.map(l => l.id).join('|');
        if (key !== nodeKey) {
            nodeKey = key;
            graph.graphData({
                nodes: frame.nodes.map(n => ({ ...n })),
                links: frame.links.map(l => ({ ...l })),
            });
        } else {
            const byId = new Map(frame.nodes.map(n => [n.id, n]));
            graph.graphData().nodes.forEach(n => {
                const v = byId.get(n.id);
                if (!v) return;
                Object.assign(n, { color: v.color, size: v.size, opacity: v.opacity, fx: v.fx ?? undefined, fy: v.fy ?? undefined, fz: v.fz ?? undefined });
                if (v.fx !== null) { n.x = v.x; n.y = v.y; n.z = v.z; }
            });
            const linksById = new Map(frame.links.map(l => [l.id, l]));
            graph.graphData().links.forEach(l => Object.assign(l, linksById.get(l.id) || {}, { source: l.source, target: l.target }));
            graph.nodeColor(graph.nodeColor()).linkColor(graph.linkColor())
                .linkWidth(graph.linkWidth()).linkDirectionalParticles(graph.linkDirectionalParticles());
        }
        applyForce(frame.force);
        if (frame.layout !== 'force') graph.d3ReheatSimulation();

        if (scene.camera) {
            const c = liveCamera(scene.camera);
            if (dimensions === 3) {
                graph.cameraPosition(c.position, c.lookAt, c.durationMs);
            } else {
                graph.centerAt(c.lookAt.x, c.lookAt.y, c.durationMs);
            }
        }
        if (scene.fit) graph.zoomToFit(scene.fit.durationMs, scene.fit.padding);
    }

    function escapeHtml(text) {
        const div = document.createElement('div');
        div.textContent = text ?? '';
        return div.innerHTML;
    }

    function renderState(state) {
        const s = state.stats;
        el('stats').textContent = s.databaseName ? `${s.nodeCount} nodes, ${s.edgeCount} edges` : '';

        el('legend').innerHTML = state.legend.map(e =>
            `<div class="legend-item" data-type="${escapeHtml(e.entityType)}">
                <span class="legend-dot" style="background:${e.color}"></span>
                ${escapeHtml(e.entityType)}<span class="legend-count">${e.count}</span></div>`).join('');

        const t = state.tooltip;
        if (t) {
            el('tooltip').innerHTML = `<div class="title">${escapeHtml(t.title)}</div>` +
                (t.subtitle ? `<div class="subtitle">${escapeHtml(t.subtitle)}</div>` : '') +
                t.lines.map(l => `<div>${escapeHtml(l)}</div>`).join('') +
                (t.more ? `<div class="subtitle">${escapeHtml(t.more)}</div>` : '');
            el('tooltip').style.left = (mouse.x + 12) + 'px';
            el('tooltip').style.top = (mouse.y + 12) + 'px';
            el('tooltip').style.display = 'block';
        } else {
            el('tooltip').style.display = 'none';
        }

        const d = state.details;
        if (d) {
            el('details').innerHTML = `<h2>${escapeHtml(d.label)}</h2>
                <div class="type" style="color:${d.color}">${escapeHtml(d.entityType)}</div>
                <strong>Observations</strong><ul>${d.observations.map(o =>
                    `<li>${escapeHtml(o.text)}<div class="meta">${escapeHtml(o.timestamp || '')} ${escapeHtml(o.source || '')}</div></li>`).join('')}</ul>
                <strong>Connections</strong><ul>${d.connections.map(c =>
                    `<li class="conn" data-node="${escapeHtml(c.nodeId)}">${c.direction === 'incoming' ? '&larr;' : '&rarr;'}
                     ${escapeHtml(c.relation)} ${escapeHtml(c.nodeLabel)} (${escapeHtml(c.nodeType)})</li>`).join('')}</ul>`;
            el('details').style.display = 'block';
        } else {
            el('details').style.display = 'none';
        }
    }

    async function poll() {
        try {
            applyScene(await api('GET', '/api/session/scene'));
            renderState(await api('GET', '/api/session'));
        } catch (e) {
            console.error(e);
        }
    }

    async function init() {
        const databases = await api('GET', '/api/databases');
        el('database').innerHTML = databases.map(d =>
            `<option value="${escapeHtml(d.id)}">${escapeHtml(d.display_name)} (${escapeHtml(d.size_formatted)})</option>`).join('');
        if (databases.length) await api('POST', '/api/session/load', { database: databases[0].id });
        await poll();
        setInterval(poll, 400);
    }

    document.addEventListener('mousemove', e => { mouse = { x: e.clientX, y: e.clientY }; });
    el('database').addEventListener('change', e => api('POST', '/api/session/load', { database: e.target.value }));
    el('layout').addEventListener('change', e => api('POST', '/api/session/layout', { layout: e.target.value }));
    el('search').addEventListener('input', e => api('POST', '/api/session/search', { term: e.target.value }));
    el('search').addEventListener('keydown', e => {
        if (e.key === 'Escape') { e.target.value = ''; api('DELETE', '/api/session/search'); }
    });
    el('fit').addEventListener('click', () => api('POST', '/api/session/fit'));
    el('reset').addEventListener('click', () => { el('search').value = ''; api('POST', '/api/session/reset'); });
    el('details').addEventListener('click', e => {
        const item = e.target.closest('.conn');
        if (item) api('POST', '/api/session/navigate', { node_id: item.dataset.node });
    });
    el('legend').addEventListener('click', e => {
        const item = e.target.closest('.legend-item');
        if (item) { el('search').value = item.dataset.type; api('POST', '/api/session/search', { term: item.dataset.type, immediate: true }); }
    });

    init();
    </script>
</body>
</html>
"""
